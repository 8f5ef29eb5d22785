"""
Unit tests for the attachment registry.
"""

import io
from unittest.mock import AsyncMock

import pytest
from starlette.datastructures import Headers, UploadFile

from schoolhub.core.exceptions import InternalError, PayloadTooLargeError
from schoolhub.modules.attachments.models import AttachmentParent
from schoolhub.modules.attachments.service import (
    PendingUpload,
    discard_objects,
    read_uploads,
    store_uploads,
)


def upload(name: str, data: bytes, content_type: str = "text/plain") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(data),
        size=len(data),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


class TestReadUploads:
    async def test_reads_every_file(self):
        pending = await read_uploads([upload("a.txt", b"aaa"), upload("b.txt", b"bb")], 10)

        assert [p.file_name for p in pending] == ["a.txt", "b.txt"]
        assert [p.size for p in pending] == [3, 2]
        assert pending[0].mime_type == "text/plain"

    async def test_one_oversize_file_rejects_all(self):
        with pytest.raises(PayloadTooLargeError) as exc_info:
            await read_uploads([upload("ok.txt", b"x"), upload("big.bin", b"x" * 11)], 10)
        assert exc_info.value.status_code == 413
        assert "big.bin" in exc_info.value.message

    async def test_file_exactly_at_limit_is_accepted(self):
        pending = await read_uploads([upload("edge.bin", b"x" * 10)], 10)
        assert pending[0].size == 10


class TestStoreUploads:
    async def test_records_metadata_against_parent(self, mock_db, mock_store):
        uploads = [PendingUpload("notes.txt", "text/plain", b"hello")]

        attachments = await store_uploads(
            mock_db,
            mock_store,
            uploads,
            parent=AttachmentParent.MATERIAL,
            parent_id="m1",
            uploaded_by="t1",
        )

        [attachment] = attachments
        assert attachment.material_id == "m1"
        assert attachment.assignment_id is None
        assert attachment.size == 5
        assert attachment.url.startswith("http://files/material/m1/")
        assert attachment.storage_key.endswith("-notes.txt")
        mock_db.flush.assert_awaited_once()

    async def test_store_failure_discards_already_stored_objects(self, mock_db, mock_store):
        stored = []

        async def put(key, data, content_type):
            if stored:
                raise OSError("disk full")
            stored.append(key)
            return f"http://files/{key}"

        mock_store.put = AsyncMock(side_effect=put)
        uploads = [
            PendingUpload("one.txt", "text/plain", b"1"),
            PendingUpload("two.txt", "text/plain", b"2"),
        ]

        with pytest.raises(InternalError):
            await store_uploads(
                mock_db,
                mock_store,
                uploads,
                parent=AttachmentParent.SUBMISSION,
                parent_id="s1",
                uploaded_by="u1",
            )

        mock_store.delete.assert_awaited_once_with(stored[0])
        mock_db.flush.assert_not_called()

    async def test_nothing_to_store(self, mock_db, mock_store):
        result = await store_uploads(
            mock_db, mock_store, [], parent=AttachmentParent.ASSIGNMENT, parent_id="a1",
            uploaded_by="t1",
        )
        assert result == []
        mock_store.put.assert_not_called()


class TestDiscardObjects:
    async def test_failures_are_logged_not_raised(self, mock_store):
        mock_store.delete = AsyncMock(side_effect=[OSError("gone"), None])

        await discard_objects(mock_store, ["k1", "k2"])

        assert mock_store.delete.await_count == 2
