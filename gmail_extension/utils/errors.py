"""Exception hierarchy for the Gmail extension.

Validation failures on user input are never raised; they are reported as
validation outcomes. The exceptions below cover everything else: the
authorization-required signal that must always reach the host, token and
storage problems, Gmail transport failures and continuation lookups.
"""

from __future__ import annotations


class GmailExtensionError(Exception):
    """Base exception for all Gmail extension errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class AuthenticationError(GmailExtensionError):
    """Exception raised for credential-related errors."""

    pass


class MustAuthorizeError(AuthenticationError):
    """The mailbox owner has to (re)authorize access before anything can run.

    This is the one error that operation handlers never convert into a
    response. It is re-raised unchanged so the host can start its own
    authorization flow.

    Attributes:
        user_id: Token store key of the mailbox that needs authorization.
    """

    def __init__(
        self,
        message: str,
        user_id: str = "default",
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.user_id = user_id


class TokenError(AuthenticationError):
    """Exception raised for token encryption, decryption, or storage errors.

    Examples:
        - Decryption failed due to an invalid key
        - Stored record is corrupted or not valid JSON
        - Record file could not be written
    """

    pass


class ContinuationError(GmailExtensionError):
    """Exception raised when a continuation record cannot be used.

    Attributes:
        continuation_id: The identifier that was looked up.
        reason: One of "not_found", "expired", "corrupt" or
            "operation_mismatch".
    """

    def __init__(
        self,
        message: str,
        continuation_id: str | None = None,
        reason: str | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.continuation_id = continuation_id
        self.reason = reason


class GmailAPIError(GmailExtensionError):
    """Exception raised for errors from Gmail API calls.

    Attributes:
        status_code: HTTP status code from the API response.
        error_code: Gmail API-specific error code, if available.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        """Initialize the Gmail API error exception.

        Args:
            message: Human-readable error description.
            status_code: HTTP status code from the API response.
            error_code: Gmail API-specific error code, if available.
            details: Optional dictionary containing additional error context.
        """
        super().__init__(message, details)
        self.status_code = status_code
        self.error_code = error_code


class ValidationError(GmailExtensionError):
    """Exception raised for configuration and parameter errors.

    Attributes:
        field: The name of the field that failed validation, if applicable.
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, object] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field


__all__ = [
    "GmailExtensionError",
    "AuthenticationError",
    "MustAuthorizeError",
    "TokenError",
    "ContinuationError",
    "GmailAPIError",
    "ValidationError",
]
