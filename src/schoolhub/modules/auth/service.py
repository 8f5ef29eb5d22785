"""
Authentication Service

Minimal JWT issuer backing the identity gate:
- register: create an account (admin accounts need an admin caller)
- login: verify credentials, throttled per email and client address
- refresh: exchange a refresh token for a new access token
- logout: denylist the presented access token until it expires
"""

import logging
import time

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor
from schoolhub.core.config import settings
from schoolhub.core.exceptions import ConflictError, ForbiddenError, UnauthenticatedError
from schoolhub.core.rate_limit import enforce_rate_limit
from schoolhub.core.redis import revoke_token
from schoolhub.core.security import (
    REFRESH_TOKEN_TYPE,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from schoolhub.modules.auth.schemas import LoginRequest, RegisterRequest
from schoolhub.modules.users.models import User, UserRole
from schoolhub.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


def _access_token_for(user: User) -> str:
    return create_access_token(
        subject=user.id,
        additional_claims={"role": user.role.value},
    )


async def register(db: AsyncSession, data: RegisterRequest, actor: Actor | None) -> User:
    """
    Create a new account.

    Raises:
        ForbiddenError: Admin role requested without an admin caller
        ConflictError: Email already registered
    """
    if data.role == UserRole.ADMIN and (actor is None or not actor.is_admin):
        logger.warning("Registration with admin role refused for non-admin caller")
        raise ForbiddenError("Only administrators can create administrator accounts")

    if await UserRepository.email_exists(db, data.email):
        raise ConflictError("A user with this email already exists", "EMAIL_TAKEN")

    try:
        user = await UserRepository.create(
            db,
            email=data.email,
            password_hash=hash_password(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
            phone=data.phone,
            address=data.address,
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("A user with this email already exists", "EMAIL_TAKEN") from e

    logger.info(f"Registered user {user.id} ({user.role.value})")
    return user


async def login(
    db: AsyncSession, credentials: LoginRequest, client_ip: str | None
) -> tuple[str, str, User]:
    """
    Authenticate a user.

    Returns:
        (access token, refresh token, user)

    Raises:
        RateLimitExceededError: Too many attempts for this email and address
        UnauthenticatedError: Unknown email, wrong password or inactive account
    """
    email = credentials.email.strip().lower()
    await enforce_rate_limit(
        f"login:{email}:{client_ip or 'unknown'}",
        settings.login_rate_limit,
        settings.login_rate_limit_window_seconds,
    )

    user = await UserRepository.get_by_email(db, email)
    if user is None or not verify_password(credentials.password, user.password_hash):
        logger.warning("Failed login attempt")
        raise UnauthenticatedError("Invalid email or password.", "INVALID_CREDENTIALS")

    if not user.is_active:
        logger.warning(f"Login attempt for inactive account: {user.id}")
        raise UnauthenticatedError("Your account has been deactivated.", "ACCOUNT_INACTIVE")

    logger.info(f"User logged in: {user.id} (role: {user.role.value})")
    return _access_token_for(user), create_refresh_token(user.id), user


async def refresh(db: AsyncSession, refresh_token: str) -> str:
    """
    Issue a new access token.

    Raises:
        UnauthenticatedError: Invalid, expired or non-refresh token, or the
            user no longer exists or is inactive
    """
    payload = decode_token(refresh_token)
    if payload is None or payload.get("type") != REFRESH_TOKEN_TYPE:
        raise UnauthenticatedError("Invalid or expired refresh token.", "INVALID_TOKEN")

    user = await UserRepository.get_by_id(db, payload.get("sub", ""))
    if user is None or not user.is_active:
        raise UnauthenticatedError("User account not found or inactive.", "INVALID_TOKEN_USER")

    return _access_token_for(user)


async def logout(actor: Actor) -> None:
    """Denylist the caller's access token for the rest of its lifetime."""
    if not actor.token_id:
        return
    ttl = int((actor.token_expires_at or 0) - time.time())
    if ttl <= 0:
        return
    await revoke_token(actor.token_id, ttl)
    logger.info(f"User {actor.id} logged out")
