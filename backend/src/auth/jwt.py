"""JWT token generation and validation

This module handles JWT access token creation and validation for authentication.

JWT Token Claims Structure:
===========================

Standard JWT Claims:
- sub (Subject): User ID as UUID string
  Example: "550e8400-e29b-41d4-a716-446655440000"
  Purpose: Identifies the principal; every document check compares it to owner_id

- iat (Issued At): Unix timestamp when token was created
- exp (Expiration): Unix timestamp when token expires (iat + JWT_EXPIRY_MINUTES)

Custom Claims:
- email: User's email address, for display and log correlation

Security Properties:
- Algorithm: JWT_ALGORITHM (HS256 by default, HMAC symmetric signing)
- Secret: JWT_SECRET setting
- No refresh tokens (re-login after expiry)
- Token tamper-proof (signature validation fails if claims modified)

Example Token Payload:
{
  "sub": "550e8400-e29b-41d4-a716-446655440000",
  "email": "jane@example.com",
  "iat": 1704368400,
  "exp": 1704372000
}
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional
from uuid import UUID
import jwt

from config import get_settings


def _get_jwt_secret() -> str:
    """Get JWT_SECRET from settings.

    Raises:
        ValueError: If JWT_SECRET is empty
    """
    secret = get_settings().JWT_SECRET
    if not secret:
        raise ValueError("JWT_SECRET is not set")
    return secret


def create_access_token(
    user_id: UUID,
    email: str,
    expires_in: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token for an authenticated user.

    Args:
        user_id: User's UUID
        email: User's email address
        expires_in: Token lifetime (defaults to JWT_EXPIRY_MINUTES)

    Returns:
        str: Signed JWT token
    """
    settings = get_settings()
    if expires_in is None:
        expires_in = timedelta(minutes=settings.JWT_EXPIRY_MINUTES)

    now = datetime.now(timezone.utc)
    expiration = now + expires_in

    payload = {
        'sub': str(user_id),  # Subject: user ID
        'email': email,
        'iat': int(now.timestamp()),  # Issued at
        'exp': int(expiration.timestamp())  # Expiration
    }

    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
    """
    try:
        return jwt.decode(
            token,
            _get_jwt_secret(),
            algorithms=[get_settings().JWT_ALGORITHM],
        )
    except jwt.ExpiredSignatureError:
        raise jwt.ExpiredSignatureError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")
