"""
Shared Schemas

Pydantic base classes and the response envelope used by every router.
Wire format is camelCase; inputs also accept snake_case field names.
"""

from datetime import datetime
from typing import Annotated, Generic, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from schoolhub.modules.shared.models import ensure_utc

T = TypeVar("T")

# Naive values (SQLite reads, clients omitting an offset) are taken as UTC
UTCDateTime = Annotated[datetime, AfterValidator(ensure_utc)]


class CamelModel(BaseModel):
    """Base schema with camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Standard response envelope: {success, data?, message?}."""

    success: bool = True
    data: T | None = None
    message: str | None = None


class ErrorResponse(CamelModel):
    """Error envelope rendered by the exception handlers."""

    success: bool = False
    message: str
    error: str


def ok(data: T | None = None, message: str | None = None) -> ApiResponse[T]:
    """Wrap a payload in the success envelope."""
    return ApiResponse(success=True, data=data, message=message)
