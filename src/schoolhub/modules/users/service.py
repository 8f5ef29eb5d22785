"""
User Service Layer

Profile reads, updates and deletion with self-access rules:
- Anyone may read and update their own profile
- Teachers may read any user and list students
- Admins may read, update and delete anyone
- email and role never change after creation
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor
from schoolhub.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from schoolhub.core.policy import Action, UserScope, require
from schoolhub.modules.courses import repository as course_repository
from schoolhub.modules.users.models import User, UserRole
from schoolhub.modules.users.repository import UserRepository
from schoolhub.modules.users.schemas import UserUpdate

logger = logging.getLogger(__name__)


async def get_user_or_404(db: AsyncSession, user_id: str) -> User:
    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


async def list_users(
    db: AsyncSession,
    actor: Actor,
    *,
    role: UserRole | None = None,
    search: str | None = None,
) -> list[User]:
    """
    List users visible to the actor.

    Teachers only ever see students, whatever role filter they pass.
    """
    require(actor, Action.LIST_USERS, message="Students cannot list users")

    if actor.is_teacher:
        if role not in (None, UserRole.STUDENT):
            raise ForbiddenError("Teachers can only list students")
        role = UserRole.STUDENT

    return await UserRepository.list_users(db, role=role, search=search)


async def get_user(db: AsyncSession, actor: Actor, user_id: str) -> User:
    user = await get_user_or_404(db, user_id)
    require(actor, Action.READ_USER, UserScope(user.id), "You can only view your own profile")
    return user


async def update_user(db: AsyncSession, actor: Actor, user_id: str, data: UserUpdate) -> User:
    """
    Update profile fields.

    Raises:
        NotFoundError: Unknown user
        ForbiddenError: Not the user themselves nor an admin, or a
            non-admin trying to change is_active
        ValidationError: Attempt to change email or role
    """
    user = await get_user_or_404(db, user_id)
    require(actor, Action.UPDATE_USER, UserScope(user.id), "You can only update your own profile")

    changes = data.model_dump(exclude_unset=True)

    email = changes.pop("email", None)
    if email is not None and email.strip().lower() != user.email:
        raise ValidationError("Email cannot be changed", "IMMUTABLE_FIELD")
    role = changes.pop("role", None)
    if role is not None and role != user.role:
        raise ValidationError("Role cannot be changed", "IMMUTABLE_FIELD")

    if "is_active" in changes and not actor.is_admin:
        raise ForbiddenError("Only administrators can activate or deactivate accounts")

    for required in ("first_name", "last_name"):
        if required in changes and changes[required] is None:
            raise ValidationError(f"{required} cannot be empty")

    await UserRepository.update(db, user, **changes)
    await db.commit()

    logger.info(f"User {user.id} updated by {actor.id}: {sorted(changes)}")
    return user


async def delete_user(db: AsyncSession, actor: Actor, user_id: str) -> None:
    """
    Delete a user and their memberships.

    Raises:
        ForbiddenError: Actor is not an admin
        NotFoundError: Unknown user
        ConflictError: The user is still teacher of record for a course
    """
    require(actor, Action.DELETE_USER, UserScope(user_id), "Only administrators can delete users")
    user = await get_user_or_404(db, user_id)

    taught = await course_repository.count_taught_by(db, user.id)
    if taught:
        logger.warning(f"Refusing to delete teacher {user.id} with {taught} course(s)")
        raise ConflictError(
            f"User is teacher of record for {taught} course(s); reassign them first",
            "TEACHER_OF_RECORD",
        )

    await UserRepository.delete_with_memberships(db, user)
    await db.commit()
    logger.info(f"User {user_id} deleted by {actor.id}")
