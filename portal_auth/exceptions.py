"""Error types raised by the auth services.

Routers turn ``AuthError`` subclasses into JSON responses using
``status_code`` and ``message``. Messages are safe to show to clients;
anything internal is logged where the failure happens instead.
"""

from enum import Enum


class AuthError(Exception):
    """Base class for failures that map onto an HTTP response."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuthError):
    status_code = 400


class InvalidCredentialsError(ValidationError):
    """Unknown email or wrong password. Both produce the same message."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class InvalidResetTokenError(ValidationError):
    """Any reset-token failure: expiry, bad signature, prior use, supersession."""

    def __init__(self) -> None:
        super().__init__("Invalid or expired token.")


class ConflictError(AuthError):
    status_code = 409


class UnauthenticatedError(AuthError):
    status_code = 401


class NotFoundError(AuthError):
    status_code = 404


class DependencyFailure(AuthError):
    """Storage or email collaborator failed."""

    status_code = 500

    def __init__(self, message: str = "Internal server error.") -> None:
        super().__init__(message)


class EmailDeliveryError(DependencyFailure):
    def __init__(self) -> None:
        super().__init__("Error sending reset email.")


class RejectReason(str, Enum):
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"
    MALFORMED = "malformed"
    WRONG_KIND = "wrong_kind"


class TokenRejected(Exception):
    """A session or reset token failed validation."""

    def __init__(self, reason: RejectReason) -> None:
        super().__init__(f"Token rejected: {reason.value}")
        self.reason = reason
