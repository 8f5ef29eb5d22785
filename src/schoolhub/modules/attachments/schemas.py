"""Attachment schemas."""

from schoolhub.modules.shared import CamelModel, UTCDateTime


class AttachmentResponse(CamelModel):
    id: str
    file_name: str
    url: str
    size: int
    mime_type: str
    uploaded_at: UTCDateTime
    uploaded_by: str
