"""
Object Store

Accepts uploaded bytes and returns a stable URL. The core only records
metadata, so any backend that implements ObjectStore can be plugged in
through the get_object_store dependency. The bundled LocalObjectStore
writes under settings.storage_dir; main.py serves that directory.

Keys look like `<parent-kind>/<parent-id>/<uuid>-<sanitised file name>`.
"""

import asyncio
import logging
import re
import uuid
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from schoolhub.core.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
MAX_NAME_LENGTH = 120


def sanitise_file_name(file_name: str) -> str:
    """Strip directories and anything outside [A-Za-z0-9._-] from a client file name."""
    name = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return (name or "file")[-MAX_NAME_LENGTH:]


def build_key(parent_kind: str, parent_id: str, file_name: str) -> str:
    return f"{parent_kind}/{parent_id}/{uuid.uuid4().hex}-{sanitise_file_name(file_name)}"


class ObjectStore(Protocol):
    """Anything that can hold bytes under a key and hand back a URL."""

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store data under key and return its public URL."""
        ...

    async def delete(self, key: str) -> None:
        ...


class LocalObjectStore:
    """Object store backed by a local directory."""

    def __init__(self, base_dir: str | Path, public_url: str):
        self.base_dir = Path(base_dir)
        self.public_url = public_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.base_dir / key).resolve()
        if not path.is_relative_to(self.base_dir.resolve()):
            raise ValueError(f"Object key escapes the storage directory: {key}")
        return path

    def _write(self, key: str, data: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        await asyncio.to_thread(self._write, key, data)
        logger.debug(f"Stored {len(data)} bytes at {key} ({content_type})")
        return f"{self.public_url}/{key}"

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._path(key).unlink, True)


@lru_cache
def get_object_store() -> ObjectStore:
    """FastAPI dependency returning the configured object store."""
    return LocalObjectStore(settings.storage_dir, settings.storage_public_url)
