"""
Unit tests for the local object store.
"""

import pytest

from schoolhub.core.storage import LocalObjectStore, build_key, sanitise_file_name


class TestFileNames:
    def test_directories_are_stripped(self):
        assert sanitise_file_name("../../etc/passwd") == "passwd"
        assert sanitise_file_name("C:\\Users\\me\\report.pdf") == "report.pdf"

    def test_unsafe_characters_are_replaced(self):
        assert sanitise_file_name("my essay (final).docx") == "my_essay_final_.docx"

    def test_empty_name_falls_back(self):
        assert sanitise_file_name("...") == "file"

    def test_key_layout(self):
        key = build_key("submission", "abc", "notes.txt")
        kind, parent_id, name = key.split("/")
        assert kind == "submission"
        assert parent_id == "abc"
        assert name.endswith("-notes.txt")


class TestLocalObjectStore:
    async def test_put_writes_bytes_and_returns_url(self, tmp_path):
        store = LocalObjectStore(tmp_path, "http://files.local/uploads/")
        url = await store.put("material/m1/x-notes.txt", b"hello", "text/plain")

        assert url == "http://files.local/uploads/material/m1/x-notes.txt"
        assert (tmp_path / "material/m1/x-notes.txt").read_bytes() == b"hello"

    async def test_delete_removes_and_tolerates_missing(self, tmp_path):
        store = LocalObjectStore(tmp_path, "http://files.local")
        await store.put("a/b/c.txt", b"x", "text/plain")

        await store.delete("a/b/c.txt")
        await store.delete("a/b/c.txt")

        assert not (tmp_path / "a/b/c.txt").exists()

    async def test_key_cannot_escape_base_dir(self, tmp_path):
        store = LocalObjectStore(tmp_path / "root", "http://files.local")
        with pytest.raises(ValueError):
            await store.put("../outside.txt", b"x", "text/plain")
