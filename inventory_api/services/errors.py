"""Typed error conditions raised by the authentication core.

The HTTP layer maps these to status codes by class, never by message text.
Messages are fixed and client-safe; they never carry internal detail.
"""


class AuthError(Exception):
    """Base class for user-facing authentication failures.

    Attributes:
        code: Stable machine-readable error code
        message: Client-safe message
    """

    code = "AUTH_ERROR"
    message = "Authentication failed"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class UserAlreadyExists(AuthError):
    """Registration attempted with an email that is already taken."""

    code = "USER_ALREADY_EXISTS"
    message = "A user with this email already exists"


class InvalidCredentials(AuthError):
    """Unknown email or wrong password (indistinguishable by design)."""

    code = "INVALID_CREDENTIALS"
    message = "Invalid email or password"


class InvalidRefreshToken(AuthError):
    """Refresh token unknown, already rotated, or expired."""

    code = "INVALID_REFRESH_TOKEN"
    message = "Invalid or expired refresh token"


class InvalidAccessToken(AuthError):
    """Bearer access token failed verification."""

    code = "INVALID_ACCESS_TOKEN"
    message = "Invalid or expired access token"


class StorageUnavailable(Exception):
    """The credential store could not complete an operation.

    Surfaces to clients only as an opaque internal error.
    """

    code = "INTERNAL_ERROR"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Credential store operation failed: {operation}")
