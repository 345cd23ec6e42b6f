"""Error handling framework for BizAdvisor.

This package provides:
- Error code registry with E-XXXX format codes
- Typed domain exceptions raised by the service layer
- AppError, the localized client-visible error

Error categories:
- E-1xxx: Missing or foreign resources
- E-2xxx: Validation errors
- E-3xxx: Advisor service errors
- E-4xxx: System/internal errors
- E-5xxx: Authentication errors
"""

from src.errors.registry import (
    ErrorCategory,
    ErrorCode,
    ERROR_REGISTRY,
    get_error,
)
from src.errors.domain import (
    DomainError,
    InvalidSessionError,
    NotFoundError,
    NotFoundOrNotOwnedError,
    PersistenceFailure,
    UnsupportedFormatError,
    UpstreamUnavailableError,
    ValidationError,
)
from src.errors.formatter import AppError

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "get_error",
    # Domain
    "DomainError",
    "NotFoundError",
    "NotFoundOrNotOwnedError",
    "ValidationError",
    "UnsupportedFormatError",
    "UpstreamUnavailableError",
    "PersistenceFailure",
    "InvalidSessionError",
    # Formatter
    "AppError",
]
