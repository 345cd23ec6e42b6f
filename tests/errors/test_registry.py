"""Unit tests for src/errors/registry.py.

Tests verify:
- Every error code is registered with its category, key and HTTP status
- Both message templates carry the same placeholders
"""

import string

import pytest

from src.errors.registry import ERROR_REGISTRY, ErrorCategory, get_error


@pytest.mark.parametrize(
    "code,category,key,status",
    [
        ("E-1001", ErrorCategory.RESOURCE, "conversation-not-found-or-not-owned", 404),
        ("E-1002", ErrorCategory.RESOURCE, "conversation-not-found", 404),
        ("E-1003", ErrorCategory.RESOURCE, "user-not-found", 404),
        ("E-1004", ErrorCategory.RESOURCE, "telegram-user-not-found", 404),
        ("E-1005", ErrorCategory.RESOURCE, "file-not-found", 404),
        ("E-2001", ErrorCategory.VALIDATION, "message-and-user-id-required", 400),
        ("E-2002", ErrorCategory.VALIDATION, "invalid-request", 400),
        ("E-3001", ErrorCategory.ADVISOR, "advisor-unavailable", 502),
        ("E-4001", ErrorCategory.SYSTEM, "database-error", 500),
        ("E-5001", ErrorCategory.AUTH, "invalid-session", 401),
    ],
)
def test_error_codes_registered(code, category, key, status):
    """All error codes must be registered."""
    error = get_error(code)
    assert error is not None, f"{code} not found in registry"
    assert error.category == category
    assert error.key == key
    assert error.http_status == status


def _placeholders(template: str) -> set[str]:
    return {name for _, name, _, _ in string.Formatter().parse(template) if name}


@pytest.mark.parametrize("code", sorted(ERROR_REGISTRY))
def test_templates_share_placeholders(code):
    """English and Russian templates substitute the same context keys."""
    error = ERROR_REGISTRY[code]
    assert _placeholders(error.message_template) == _placeholders(error.message_template_ru)


def test_unknown_code_returns_none():
    assert get_error("E-9999") is None


def test_resource_category_codes():
    codes = {e.code for e in ERROR_REGISTRY.values() if e.category == ErrorCategory.RESOURCE}
    assert codes == {"E-1001", "E-1002", "E-1003", "E-1004", "E-1005"}
