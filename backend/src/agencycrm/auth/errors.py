"""Domain errors raised by the auth layer.

Each carries the HTTP status it maps to; the API renders them as
``{"message": ...}``.
"""


class AuthError(Exception):
    """Base class for failures with a client-facing status and message."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class ValidationFailed(AuthError):
    """Missing or malformed request fields."""

    status_code = 400


class Conflict(AuthError):
    """The resource already exists (reported as 400)."""

    status_code = 400


class Unauthorized(AuthError):
    """Who are you: bad credentials or an invalid, expired or absent token."""

    status_code = 401

    @property
    def headers(self) -> dict[str, str] | None:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(AuthError):
    """Authenticated, but the role is not allowed."""

    status_code = 403


class NotFound(AuthError):
    status_code = 404
