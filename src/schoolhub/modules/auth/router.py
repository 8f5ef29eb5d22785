"""Authentication router."""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import Actor, get_current_actor, get_optional_actor
from schoolhub.core.database import get_db
from schoolhub.modules.auth import service
from schoolhub.modules.auth.schemas import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from schoolhub.modules.shared import ApiResponse, ok
from schoolhub.modules.users.schemas import UserResponse
from schoolhub.modules.users.service import get_user_or_404

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[CurrentUserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register",
)
async def register(
    data: RegisterRequest,
    actor: Actor | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
):
    """
    Create an account.

    Public for student and teacher accounts. Creating an admin account
    requires an admin bearer token.
    """
    user = await service.register(db, data, actor)
    return ok(CurrentUserResponse(user=UserResponse.model_validate(user)), "User registered")


@router.post("/login", response_model=ApiResponse[LoginResponse], summary="Login")
async def login(
    credentials: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate user and return JWT tokens.

    Raises:
        401: Invalid credentials or inactive account
        429: Too many attempts
    """
    client_ip = request.client.host if request.client else None
    token, refresh_token, user = await service.login(db, credentials, client_ip)
    return ok(
        LoginResponse(
            token=token,
            refresh_token=refresh_token,
            user=UserResponse.model_validate(user),
        )
    )


@router.post("/refresh", response_model=ApiResponse[TokenResponse], summary="Refresh Token")
async def refresh(
    data: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    token = await service.refresh(db, data.refresh_token)
    return ok(TokenResponse(token=token))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Logout")
async def logout(actor: Actor = Depends(get_current_actor)) -> Response:
    await service.logout(actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=ApiResponse[CurrentUserResponse], summary="Current User")
async def me(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db),
):
    user = await get_user_or_404(db, actor.id)
    return ok(CurrentUserResponse(user=UserResponse.model_validate(user)))
