"""
Attachment Registry

Uploads travel in two phases:
1. read_uploads() reads every file and checks it against the per-file
   limit. One oversize file rejects the whole request before anything is
   stored.
2. store_uploads() writes the bytes to the object store and records the
   metadata against the parent. An object-store failure removes whatever
   was already stored and raises InternalError, so the caller's
   transaction is rolled back.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from schoolhub.core.exceptions import InternalError, PayloadTooLargeError
from schoolhub.core.storage import ObjectStore, build_key
from schoolhub.modules.attachments import repository
from schoolhub.modules.attachments.models import Attachment, AttachmentParent
from schoolhub.modules.attachments.schemas import AttachmentResponse

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class PendingUpload:
    """A size-checked file waiting to be stored."""

    file_name: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


async def read_uploads(files: list[UploadFile], limit_bytes: int) -> list[PendingUpload]:
    """
    Read and size-check every uploaded file.

    Raises:
        PayloadTooLargeError: If any file exceeds limit_bytes
    """
    pending = []
    for upload in files:
        file_name = upload.filename or "file"
        if upload.size is not None and upload.size > limit_bytes:
            raise PayloadTooLargeError(file_name, limit_bytes)
        data = await upload.read()
        if len(data) > limit_bytes:
            raise PayloadTooLargeError(file_name, limit_bytes)
        pending.append(
            PendingUpload(
                file_name=file_name,
                mime_type=upload.content_type or DEFAULT_MIME_TYPE,
                data=data,
            )
        )
    return pending


async def store_uploads(
    db: AsyncSession,
    store: ObjectStore,
    uploads: list[PendingUpload],
    *,
    parent: AttachmentParent,
    parent_id: str,
    uploaded_by: str,
) -> list[Attachment]:
    """
    Store the bytes and record one Attachment per upload. Only flushes.

    Raises:
        InternalError: The object store failed
    """
    stored_keys: list[str] = []
    attachments = []
    for upload in uploads:
        key = build_key(parent.value, parent_id, upload.file_name)
        try:
            url = await store.put(key, upload.data, upload.mime_type)
        except Exception as e:
            logger.error(f"Object store rejected {key}: {e}")
            await discard_objects(store, stored_keys)
            raise InternalError("File upload failed. Please try again.") from e
        stored_keys.append(key)

        attachment = Attachment(
            file_name=upload.file_name,
            url=url,
            storage_key=key,
            size=upload.size,
            mime_type=upload.mime_type,
            uploaded_by=uploaded_by,
            **{f"{parent.value}_id": parent_id},
        )
        db.add(attachment)
        attachments.append(attachment)

    if attachments:
        await db.flush()
        logger.info(f"Stored {len(attachments)} attachment(s) for {parent.value} {parent_id}")
    return attachments


async def discard_objects(store: ObjectStore, keys: list[str]) -> None:
    """Best-effort removal of stored objects. Failures are logged."""
    for key in keys:
        try:
            await store.delete(key)
        except Exception as e:
            logger.error(f"Failed to remove orphaned object {key}: {e}")


async def list_for(
    db: AsyncSession, parent: AttachmentParent, parent_ids: list[str]
) -> dict[str, list[AttachmentResponse]]:
    """Attachment responses grouped by parent id."""
    column_name = f"{parent.value}_id"
    grouped: dict[str, list[AttachmentResponse]] = defaultdict(list)
    for attachment in await repository.list_for_parents(db, parent, parent_ids):
        grouped[getattr(attachment, column_name)].append(
            AttachmentResponse.model_validate(attachment)
        )
    return grouped


async def replace_for(
    db: AsyncSession,
    store: ObjectStore,
    uploads: list[PendingUpload],
    *,
    parent: AttachmentParent,
    parent_id: str,
    uploaded_by: str,
) -> tuple[list[Attachment], list[str]]:
    """
    Swap a parent's attachments for a new set. Only flushes.

    Returns:
        (new attachments, storage keys of the replaced objects). Pass the
        keys to discard_objects() once the transaction has committed.
    """
    old = await repository.list_for_parents(db, parent, [parent_id])
    await repository.delete_for_parent(db, parent, parent_id)
    attachments = await store_uploads(
        db, store, uploads, parent=parent, parent_id=parent_id, uploaded_by=uploaded_by
    )
    return attachments, [a.storage_key for a in old]
