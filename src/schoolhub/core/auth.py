"""
Identity Gate

Resolves the `Authorization: Bearer <token>` header into an Actor.
Token signature, algorithm and expiry are checked by security.decode_token;
the gate then rejects non-access tokens and revoked tokens, and loads the
user from the database on every request (nothing is cached across
requests). Any failure raises UnauthenticatedError (HTTP 401).
"""

import logging
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.database import get_db
from schoolhub.core.exceptions import UnauthenticatedError
from schoolhub.core.redis import is_token_revoked
from schoolhub.core.security import ACCESS_TOKEN_TYPE, decode_token
from schoolhub.modules.users.models import UserRole
from schoolhub.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

# auto_error=False so a missing header maps to our 401 envelope
security = HTTPBearer(
    auto_error=False,
    description="JWT Bearer token for authentication",
)


@dataclass(frozen=True)
class Actor:
    """
    Authenticated principal for the current request.

    Attributes:
        id: User id
        role: User role, read from the database
        token_id: jti of the presented access token (used by logout)
        token_expires_at: exp claim of the access token (epoch seconds)
    """

    id: str
    role: UserRole
    token_id: str | None = None
    token_expires_at: int | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_teacher(self) -> bool:
        return self.role == UserRole.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    def __str__(self) -> str:
        return f"Actor(id={self.id}, role={self.role.value})"


async def resolve_actor(db: AsyncSession, token: str) -> Actor:
    """
    Validate an access token and load the user it names.

    Raises:
        UnauthenticatedError: If the token is invalid, expired, revoked,
            of the wrong type, or names an unknown/inactive user
    """
    payload = decode_token(token)
    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise UnauthenticatedError("Invalid or expired authentication token.", "INVALID_TOKEN")

    token_type = payload.get("type")
    if token_type != ACCESS_TOKEN_TYPE:
        logger.warning(f"Invalid token type: {token_type}")
        raise UnauthenticatedError(
            "This endpoint requires an access token.", "INVALID_TOKEN_TYPE"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthenticatedError(
            "Token contains invalid or missing claims.", "INVALID_TOKEN_CLAIMS"
        )

    jti = payload.get("jti")
    if jti:
        try:
            revoked = await is_token_revoked(jti)
        except Exception as e:
            # Fail closed when the denylist cannot be consulted
            logger.error(f"Token denylist lookup failed: {e}")
            raise UnauthenticatedError(
                "Unable to verify authentication token.", "TOKEN_CHECK_FAILED"
            ) from e
        if revoked:
            raise UnauthenticatedError("This token has been revoked.", "TOKEN_REVOKED")

    user = await UserRepository.get_by_id(db, user_id)
    if user is None or not user.is_active:
        logger.warning(f"Token for unknown or inactive user: {user_id}")
        raise UnauthenticatedError("User account not found or inactive.", "INVALID_TOKEN_USER")

    return Actor(
        id=user.id,
        role=user.role,
        token_id=jti,
        token_expires_at=payload.get("exp"),
    )


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    """
    FastAPI dependency returning the authenticated actor.

    Usage:
        @router.get("/things")
        async def list_things(actor: Actor = Depends(get_current_actor)):
            ...
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Authentication required.", "UNAUTHENTICATED")

    actor = await resolve_actor(db, credentials.credentials)
    logger.debug(f"Authenticated {actor}")
    return actor


async def get_optional_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Actor | None:
    """
    Optional authentication dependency.

    Returns the actor if a valid token is provided, or None if no token.
    An invalid token is still rejected.
    """
    if credentials is None or not credentials.credentials:
        return None
    return await resolve_actor(db, credentials.credentials)


__all__ = [
    "Actor",
    "get_current_actor",
    "get_optional_actor",
    "resolve_actor",
]
