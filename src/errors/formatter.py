"""Client-visible application errors.

This module provides:
- AppError exception class built from registry codes
- Conversion from typed domain exceptions
"""

from dataclasses import dataclass, field

from src.errors.domain import DomainError
from src.errors.registry import get_error
from src.utils.locale import Locale


@dataclass
class AppError(Exception):
    """Application error with code, localized message, and context.

    Attributes:
        code: Error code in E-XXXX format.
        key: Stable machine-readable error key.
        message: Human-readable, localized error message.
        remediation: Action user should take to resolve.
        http_status: Status code for the API response.
        is_retryable: Whether the operation can be retried without user action.
        details: Additional context dictionary.
    """

    code: str
    key: str
    message: str
    remediation: str
    http_status: int = 500
    is_retryable: bool = False
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code}: {self.message}"

    @classmethod
    def from_code(
        cls, code: str, locale: Locale = Locale.en, **kwargs: object
    ) -> "AppError":
        """Create error from registry code with context substitution.

        Args:
            code: Error code in E-XXXX format.
            locale: Selects the message template language.
            **kwargs: Context values for message template substitution.
                The special key 'details' is stored on the error as a dict
                when it is one.

        Returns:
            AppError instance with formatted message.
        """
        error_def = get_error(code)
        if not error_def:
            return cls(
                code=code,
                key="unknown-error",
                message=f"Unknown error: {code}",
                remediation="Contact support.",
            )

        template = (
            error_def.message_template_ru
            if locale == Locale.ru
            else error_def.message_template
        )
        try:
            message = template.format(**kwargs)
        except KeyError:
            # Keep template if some placeholders are missing
            message = template

        details = kwargs.get("details", {})
        if not isinstance(details, dict):
            details = {}

        return cls(
            code=error_def.code,
            key=error_def.key,
            message=message,
            remediation=error_def.remediation,
            http_status=error_def.http_status,
            is_retryable=error_def.is_retryable,
            details=details,
        )

    @classmethod
    def from_domain(cls, exc: DomainError, locale: Locale = Locale.en) -> "AppError":
        """Translate a typed domain exception into a client-visible error."""
        return cls.from_code(exc.code, locale, **exc.context)
