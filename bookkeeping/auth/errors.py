"""Authentication and authorization errors."""

from bookkeeping.services.storage import DuplicateError


class AuthError(Exception):
    """Base exception for authentication and account management."""
    pass


class InvalidCredentialsError(AuthError):
    """
    Login rejected.

    The message is the same whether the username or the password was wrong.
    """

    def __init__(self, message: str = "Invalid username or password."):
        super().__init__(message)


class DuplicateUsernameError(AuthError, DuplicateError):
    """An account with this username already exists."""

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username already exists.")


class SelfDeletionError(AuthError):
    """An account tried to delete itself."""

    def __init__(self, message: str = "You cannot delete your own account."):
        super().__init__(message)


class PermissionDeniedError(AuthError):
    """The current account lacks the role required for an action."""
    pass


class NotAuthenticatedError(AuthError):
    """No account is logged in."""

    def __init__(self, message: str = "Please log in first."):
        super().__init__(message)
