"""
Shared module - base model, time helpers and response envelope.
"""

from schoolhub.modules.shared.models import BaseModel, ensure_utc, new_id, utcnow
from schoolhub.modules.shared.schemas import (
    ApiResponse,
    CamelModel,
    ErrorResponse,
    UTCDateTime,
    ok,
)

__all__ = [
    "BaseModel",
    "ensure_utc",
    "new_id",
    "utcnow",
    "ApiResponse",
    "CamelModel",
    "ErrorResponse",
    "UTCDateTime",
    "ok",
]
