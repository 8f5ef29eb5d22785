"""Course material schemas."""

from pydantic import Field

from schoolhub.modules.attachments.schemas import AttachmentResponse
from schoolhub.modules.materials.models import MaterialType
from schoolhub.modules.shared import CamelModel, UTCDateTime


class MaterialCreate(CamelModel):
    """Body (JSON or multipart fields) for POST /courses/{id}/materials."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    type: MaterialType
    url: str | None = Field(None, max_length=1000)
    content: str | None = Field(None, max_length=50000)


class MaterialResponse(CamelModel):
    id: str
    course_id: str
    title: str
    description: str | None = None
    type: MaterialType
    url: str | None = None
    content: str | None = None
    upload_date: UTCDateTime
    added_by: str
    attachments: list[AttachmentResponse] = Field(default_factory=list)
