"""Authentication endpoints for DocVault API

Provides endpoints for user login and retrieving current user information.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from config import get_settings
from database import get_db
from infrastructure.repositories.user_repository import UserRepository
from .schemas import LoginRequest, LoginResponse, MeResponse, UserResponse
from .password import hash_password, needs_rehash, verify_password
from .jwt import create_access_token
from .dependencies import CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Authenticate user and return JWT access token.

    Security measures:
    - Same 401 message for unknown email and wrong password
    - Disabled accounts are rejected
    - last_login_at is updated on successful login
    - Hashes made with outdated Argon2 parameters are upgraded

    Raises:
        HTTPException: 401 if credentials are invalid or account is disabled
    """
    user = UserRepository(db).get_by_email(credentials.email)

    if not user or not verify_password(credentials.password, user.password_hash):
        logger.warning("Login failed: invalid credentials", extra={"email": credentials.email})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if user.status == 'DISABLED':
        logger.warning("Login failed: account disabled", extra={"user_id": str(user.id)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is disabled"
        )

    if needs_rehash(user.password_hash):
        user.password_hash = hash_password(credentials.password)

    user.last_login_at = datetime.now(timezone.utc)
    db.commit()

    logger.info("Login succeeded", extra={"user_id": str(user.id)})

    access_token = create_access_token(user_id=user.id, email=user.email)

    return LoginResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=get_settings().JWT_EXPIRY_MINUTES * 60
    )


@router.get("/me", response_model=MeResponse)
def get_me(current_user: CurrentUser):
    """Get current authenticated user information."""
    return MeResponse(
        user=UserResponse.model_validate(current_user)
    )
