"""
Password hashing.

Thin wrapper over werkzeug.security. Hashes use werkzeug's
"pbkdf2:sha256:<iterations>$<salt>$<hash>" format, so the iteration
count can be raised later without invalidating existing accounts.
"""

from werkzeug.security import check_password_hash, generate_password_hash

HASH_METHOD = "pbkdf2:sha256"
DEFAULT_ITERATIONS = 600_000
SALT_LENGTH = 16


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """Create a salted PBKDF2-SHA256 hash of a password."""
    if not password:
        raise ValueError("Password must not be empty")
    return generate_password_hash(
        password,
        method=f"{HASH_METHOD}:{iterations}",
        salt_length=SALT_LENGTH,
    )


def verify_password(password: str, encoded: str) -> bool:
    """Verify a password against a stored hash. Malformed hashes never match."""
    if not isinstance(encoded, str) or not encoded:
        return False
    try:
        return check_password_hash(encoded, password)
    except ValueError:
        # Unknown method or unusable parameters
        return False


def is_password_hash(value: str) -> bool:
    """Whether a stored value looks like a hash produced by hash_password."""
    return isinstance(value, str) and value.startswith(HASH_METHOD + ":") and value.count("$") == 2
