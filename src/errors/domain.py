"""Typed domain exceptions for API error mapping.

Each exception carries the registry code it maps to, so the API layer
renders a stable machine-readable code plus a localized message without
matching on message strings.

Usage:
    # In service layer
    raise NotFoundOrNotOwnedError(conversation_id)

    # In route handler (or the app-wide handler in src.api.main)
    except DomainError as e:
        raise AppError.from_domain(e, locale)
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    code = "E-4001"

    def __init__(self, message: str) -> None:
        super().__init__(message)

    @property
    def context(self) -> dict[str, str]:
        """Values substituted into the registry message template."""
        return {"details": str(self)}


_NOT_FOUND_CODES = {
    "Conversation": "E-1002",
    "Account": "E-1003",
    "TelegramUser": "E-1004",
    "File": "E-1005",
}


class NotFoundError(DomainError):
    """Resource was not found. Maps to HTTP 404."""

    def __init__(self, resource_type: str, identifier: str) -> None:
        super().__init__(f"{resource_type} '{identifier}' not found")
        self.resource_type = resource_type
        self.identifier = identifier
        self.code = _NOT_FOUND_CODES.get(resource_type, "E-1002")

    @property
    def context(self) -> dict[str, str]:
        return {"identifier": str(self.identifier)}


class NotFoundOrNotOwnedError(DomainError):
    """Conversation is missing or belongs to another account. Maps to HTTP 404.

    The two cases are deliberately indistinguishable to the caller.
    """

    code = "E-1001"

    def __init__(self, conversation_id: str) -> None:
        super().__init__(f"Conversation '{conversation_id}' not found or not owned")
        self.conversation_id = conversation_id


class ValidationError(DomainError):
    """Validation failure. Maps to HTTP 400."""

    code = "E-2002"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        if code:
            self.code = code


class UnsupportedFormatError(ValidationError):
    """Requested file output format has no encoder."""

    def __init__(self, output_format: str) -> None:
        super().__init__(f"Unsupported output format '{output_format}'")
        self.output_format = output_format


class UpstreamUnavailableError(DomainError):
    """Advisor completion failed, timed out or returned nothing."""

    code = "E-3001"


class PersistenceFailure(DomainError):
    """A primary store write failed. Maps to HTTP 500."""

    code = "E-4001"

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        super().__init__(f"{operation} failed")
        self.operation = operation
        self.cause = cause


class InvalidSessionError(DomainError):
    """Session token is unknown or expired. Maps to HTTP 401."""

    code = "E-5001"

    def __init__(self) -> None:
        super().__init__("Session token is invalid or expired")
