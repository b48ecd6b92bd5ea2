"""Password hashing and verification using Argon2id

Hashes combine the password with a server-side PASSWORD_PEPPER that is never
stored next to the hash.

Argon2id parameters (OWASP):
- Memory cost: 65536 KB (64 MB)
- Time cost: 3 iterations
- Parallelism: 4 threads
"""

import re

from argon2 import PasswordHasher, Type
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError

from config import get_settings


_hasher = PasswordHasher(
    memory_cost=65536,  # 64 MB
    time_cost=3,
    parallelism=4,
    hash_len=32,
    salt_len=16,
    type=Type.ID
)

MIN_PASSWORD_LENGTH = 8


def _peppered(password: str) -> str:
    pepper = get_settings().PASSWORD_PEPPER
    if not pepper:
        raise ValueError("PASSWORD_PEPPER is not set")
    return password + pepper


def hash_password(password: str) -> str:
    """Hash a password using Argon2id with the global pepper.

    Returns:
        str: Argon2id hash string (format: $argon2id$v=19$m=65536,t=3,p=4$...$...)

    Raises:
        ValueError: If PASSWORD_PEPPER is not set or password is empty
    """
    if not password:
        raise ValueError("Password cannot be empty")
    return _hasher.hash(_peppered(password))


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Never raises on mismatch."""
    if not password or not password_hash:
        return False

    try:
        return _hasher.verify(password_hash, _peppered(password))
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """Whether a stored hash was made with outdated Argon2 parameters."""
    return _hasher.check_needs_rehash(password_hash)


def validate_password_strength(password: str) -> tuple[bool, str]:
    """Validate password meets strength requirements.

    Requirements:
    - At least 8 characters
    - Upper- and lowercase letters
    - At least one digit

    Example:
        >>> validate_password_strength("weak")
        (False, 'Password must be at least 8 characters long')
        >>> validate_password_strength("Secure123")
        (True, '')
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"

    if not re.search(r'[A-Z]', password) or not re.search(r'[a-z]', password):
        return False, "Password must contain upper- and lowercase letters"

    if not re.search(r'\d', password):
        return False, "Password must contain at least one digit"

    return True, ""
