"""
Users Router

Endpoints:
- GET /users - List users (admin: all, teacher: students)
- GET /users/{id} - Get a profile
- PUT /users/{id} - Update a profile (email and role are immutable)
- DELETE /users/{id} - Delete a user (admin only)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor, get_current_actor
from schoolhub.core.database import get_db
from schoolhub.modules.shared import ApiResponse, ok
from schoolhub.modules.users import service
from schoolhub.modules.users.models import UserRole
from schoolhub.modules.users.schemas import UserResponse, UserUpdate

router = APIRouter()


@router.get("", response_model=ApiResponse[list[UserResponse]], summary="List Users")
async def list_users(
    role: UserRole | None = Query(None, description="Filter by role"),
    search: str | None = Query(None, max_length=100, description="Match name or email"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    users = await service.list_users(db, actor, role=role, search=search)
    return ok([UserResponse.model_validate(user) for user in users])


@router.get("/{user_id}", response_model=ApiResponse[UserResponse], summary="Get User")
async def get_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    user = await service.get_user(db, actor, user_id)
    return ok(UserResponse.model_validate(user))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse], summary="Update User")
async def update_user(
    user_id: str,
    data: UserUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    user = await service.update_user(db, actor, user_id, data)
    return ok(UserResponse.model_validate(user), "Profile updated")


@router.delete("/{user_id}", response_model=ApiResponse[None], summary="Delete User")
async def delete_user(
    user_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    await service.delete_user(db, actor, user_id)
    return ok(message="User deleted")
