"""Authentication schemas."""

from pydantic import EmailStr, Field

from schoolhub.modules.shared import CamelModel
from schoolhub.modules.users.models import UserRole
from schoolhub.modules.users.schemas import UserResponse


class LoginRequest(CamelModel):
    """Login request schema."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(CamelModel):
    """Registration request schema."""

    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    role: UserRole = UserRole.STUDENT
    phone: str | None = Field(None, max_length=30)
    address: str | None = Field(None, max_length=500)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class LoginResponse(CamelModel):
    """Login response schema."""

    token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class TokenResponse(CamelModel):
    """New access token issued from a refresh token."""

    token: str
    token_type: str = "bearer"


class CurrentUserResponse(CamelModel):
    user: UserResponse
