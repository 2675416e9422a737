"""
Authentication Package

Accounts, password hashing and the persisted login session.
"""

from bookkeeping.auth.accounts import SESSION_KEY, USERS_KEY, AccountStore
from bookkeeping.auth.errors import (
    AuthError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    PermissionDeniedError,
    SelfDeletionError,
)
from bookkeeping.auth.passwords import (
    DEFAULT_ITERATIONS,
    hash_password,
    is_password_hash,
    verify_password,
)

__all__ = [
    # Store
    "AccountStore",
    "SESSION_KEY",
    "USERS_KEY",
    # Errors
    "AuthError",
    "DuplicateUsernameError",
    "InvalidCredentialsError",
    "NotAuthenticatedError",
    "PermissionDeniedError",
    "SelfDeletionError",
    # Passwords
    "DEFAULT_ITERATIONS",
    "hash_password",
    "is_password_hash",
    "verify_password",
]
