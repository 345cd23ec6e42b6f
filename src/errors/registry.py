"""Error code registry with E-XXXX format codes.

This module defines the error code system for BizAdvisor, organizing
errors into categories:
- E-1xxx: Missing or foreign resources
- E-2xxx: Validation errors
- E-3xxx: Advisor service errors
- E-4xxx: System/internal errors
- E-5xxx: Authentication errors

Each error includes a code, HTTP status, title, English and Russian
message templates, and remediation steps.
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error codes."""

    RESOURCE = "resource"  # E-1xxx
    VALIDATION = "validation"  # E-2xxx
    ADVISOR = "advisor"  # E-3xxx
    SYSTEM = "system"  # E-4xxx
    AUTH = "auth"  # E-5xxx


@dataclass
class ErrorCode:
    """Definition of an error code with metadata.

    Attributes:
        code: Error code in E-XXXX format.
        category: Error category for grouping.
        key: Stable machine-readable key returned to clients.
        http_status: Status code used when the error reaches the API.
        title: Short title for display.
        message_template: English message with {placeholders}.
        message_template_ru: Russian message with the same placeholders.
        remediation: Action user should take to resolve.
        is_retryable: Whether the operation can be retried without user action.
    """

    code: str
    category: ErrorCategory
    key: str
    http_status: int
    title: str
    message_template: str
    message_template_ru: str
    remediation: str
    is_retryable: bool = False


ERROR_REGISTRY: dict[str, ErrorCode] = {
    # Resource errors (E-1xxx)
    "E-1001": ErrorCode(
        code="E-1001",
        category=ErrorCategory.RESOURCE,
        key="conversation-not-found-or-not-owned",
        http_status=404,
        title="Conversation Not Found",
        message_template="Conversation not found or you don't have permission to access it.",
        message_template_ru="Диалог не найден или у вас нет прав на доступ к нему.",
        remediation="Check the conversation id and the account it belongs to.",
    ),
    "E-1002": ErrorCode(
        code="E-1002",
        category=ErrorCategory.RESOURCE,
        key="conversation-not-found",
        http_status=404,
        title="Conversation Not Found",
        message_template="Conversation '{identifier}' not found.",
        message_template_ru="Диалог '{identifier}' не найден.",
        remediation="Create the conversation first or check the id.",
    ),
    "E-1003": ErrorCode(
        code="E-1003",
        category=ErrorCategory.RESOURCE,
        key="user-not-found",
        http_status=404,
        title="Account Not Found",
        message_template="Account '{identifier}' not found.",
        message_template_ru="Пользователь '{identifier}' не найден.",
        remediation="Check the account id.",
    ),
    "E-1004": ErrorCode(
        code="E-1004",
        category=ErrorCategory.RESOURCE,
        key="telegram-user-not-found",
        http_status=404,
        title="Telegram User Not Found",
        message_template="Telegram user '{identifier}' not found.",
        message_template_ru="Пользователь Telegram '{identifier}' не найден.",
        remediation="Register the Telegram user before linking it.",
    ),
    "E-1005": ErrorCode(
        code="E-1005",
        category=ErrorCategory.RESOURCE,
        key="file-not-found",
        http_status=404,
        title="File Not Found",
        message_template="File '{identifier}' not found.",
        message_template_ru="Файл '{identifier}' не найден.",
        remediation="Check the file id in the conversation history.",
    ),
    # Validation errors (E-2xxx)
    "E-2001": ErrorCode(
        code="E-2001",
        category=ErrorCategory.VALIDATION,
        key="message-and-user-id-required",
        http_status=400,
        title="Missing Required Field",
        message_template="Message and user_id are required.",
        message_template_ru="Сообщение и user_id обязательны.",
        remediation="Provide a non-empty message and user_id.",
    ),
    "E-2002": ErrorCode(
        code="E-2002",
        category=ErrorCategory.VALIDATION,
        key="invalid-request",
        http_status=400,
        title="Invalid Request",
        message_template="Invalid request: {details}",
        message_template_ru="Некорректный запрос: {details}",
        remediation="Correct the request and retry.",
    ),
    # Advisor errors (E-3xxx)
    "E-3001": ErrorCode(
        code="E-3001",
        category=ErrorCategory.ADVISOR,
        key="advisor-unavailable",
        http_status=502,
        title="Advisor Unavailable",
        message_template="The advisor service did not return a response: {details}",
        message_template_ru="Сервис консультанта не вернул ответ: {details}",
        remediation="Wait a few moments and retry.",
        is_retryable=True,
    ),
    # System errors (E-4xxx)
    "E-4001": ErrorCode(
        code="E-4001",
        category=ErrorCategory.SYSTEM,
        key="database-error",
        http_status=500,
        title="Database Error",
        message_template="Database operation failed: {details}",
        message_template_ru="Ошибка базы данных: {details}",
        remediation="This is a system error. Retry the operation. Contact support if issue persists.",
        is_retryable=True,
    ),
    # Auth errors (E-5xxx)
    "E-5001": ErrorCode(
        code="E-5001",
        category=ErrorCategory.AUTH,
        key="invalid-session",
        http_status=401,
        title="Invalid Session",
        message_template="Session token is invalid or expired.",
        message_template_ru="Сессия недействительна или истекла.",
        remediation="Sign in again to obtain a new session.",
    ),
}


def get_error(code: str) -> ErrorCode | None:
    """Get error definition by code.

    Args:
        code: Error code in E-XXXX format.

    Returns:
        ErrorCode if found, None otherwise.
    """
    return ERROR_REGISTRY.get(code)
