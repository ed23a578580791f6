"""Tests for the uploads module: path guard and temp-directory storage.

UploadStore.accept is driven with real Starlette FormData objects, so no
HTTP layer is involved here.
"""
import asyncio
import io
import os
from pathlib import Path

import pytest
from starlette.datastructures import FormData, Headers, UploadFile

from app.config import DEFAULT_ALLOWED_MIME_TYPES
from app.uploads import (
    FileTooLargeError,
    UnsupportedFileTypeError,
    UploadedFile,
    UploadLimitError,
    UploadStore,
    is_within,
)


def _upload(content: bytes, filename: str, content_type: str, declare_size: bool = True):
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        size=len(content) if declare_size else None,
        headers=Headers({"content-type": content_type}),
    )


def _store(upload_dir: Path, max_bytes: int = 1024) -> UploadStore:
    return UploadStore(upload_dir, max_bytes, DEFAULT_ALLOWED_MIME_TYPES)


# ---------------------------------------------------------------------------
# Path guard
# ---------------------------------------------------------------------------


class TestIsWithin:
    def test_file_inside_root(self, tmp_path):
        assert is_within(tmp_path / "a.txt", tmp_path)

    def test_nested_file_inside_root(self, tmp_path):
        assert is_within(tmp_path / "x" / "y" / "a.txt", tmp_path)

    def test_root_with_trailing_separator(self, tmp_path):
        assert is_within(tmp_path / "a.txt", str(tmp_path) + os.sep)

    def test_root_itself_is_not_within(self, tmp_path):
        assert not is_within(tmp_path, tmp_path)

    def test_parent_directory_traversal(self, tmp_path):
        root = tmp_path / "uploads"
        assert not is_within(root / ".." / "secret.txt", root)

    def test_sibling_with_common_prefix(self, tmp_path):
        assert not is_within(tmp_path / "uploads-evil" / "a.txt", tmp_path / "uploads")

    def test_absolute_path_elsewhere(self, tmp_path):
        assert not is_within("/etc/passwd", tmp_path)

    def test_relative_candidate_resolves_against_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert is_within("a.txt", tmp_path)
        assert not is_within("../a.txt", tmp_path)

    def test_symlink_escaping_root(self, tmp_path):
        root = tmp_path / "uploads"
        root.mkdir()
        outside = tmp_path / "outside.txt"
        outside.write_text("secret")
        link = root / "link.txt"
        link.symlink_to(outside)
        assert not is_within(link, root)


# ---------------------------------------------------------------------------
# UploadStore.accept
# ---------------------------------------------------------------------------


class TestUploadStoreAccept:
    def test_creates_temp_dir(self, tmp_path):
        target = tmp_path / "nested" / "uploads"
        _store(target)
        assert target.is_dir()

    def test_no_file_returns_none(self, upload_dir):
        form = FormData([("name", "Ada"), ("email", "ada@example.com")])
        assert asyncio.run(_store(upload_dir).accept(form)) is None

    def test_empty_filename_is_treated_as_no_file(self, upload_dir):
        form = FormData([("file", _upload(b"", "", "application/octet-stream"))])
        assert asyncio.run(_store(upload_dir).accept(form)) is None

    def test_stores_allowed_file(self, upload_dir):
        form = FormData([("file", _upload(b"%PDF-1.4 data", "report.pdf", "application/pdf"))])
        stored = asyncio.run(_store(upload_dir).accept(form))

        assert isinstance(stored, UploadedFile)
        assert stored.original_name == "report.pdf"
        assert stored.mime_type == "application/pdf"
        assert stored.size_bytes == len(b"%PDF-1.4 data")
        assert not stored.is_image
        path = Path(stored.path)
        assert path.is_absolute()
        assert path.parent == upload_dir.resolve()
        assert path.name.endswith("-report.pdf")
        assert path.read_bytes() == b"%PDF-1.4 data"

    def test_image_flag(self, upload_dir):
        form = FormData([("file", _upload(b"\x89PNG", "cat.png", "image/png"))])
        assert asyncio.run(_store(upload_dir).accept(form)).is_image

    def test_same_name_does_not_collide(self, upload_dir):
        store = _store(upload_dir)
        first = asyncio.run(store.accept(FormData([("file", _upload(b"1", "a.txt", "text/plain"))])))
        second = asyncio.run(store.accept(FormData([("file", _upload(b"2", "a.txt", "text/plain"))])))
        assert first.path != second.path
        assert len(list(upload_dir.iterdir())) == 2

    def test_traversal_in_filename_stays_inside(self, upload_dir):
        form = FormData([("file", _upload(b"x", "../../etc/passwd", "text/plain"))])
        stored = asyncio.run(_store(upload_dir).accept(form))
        assert is_within(stored.path, upload_dir)
        assert Path(stored.path).name.endswith("-passwd")
        assert stored.original_name == "../../etc/passwd"

    def test_unsafe_characters_replaced(self, upload_dir):
        form = FormData([("file", _upload(b"x", "my file (1).txt", "text/plain"))])
        stored = asyncio.run(_store(upload_dir).accept(form))
        assert Path(stored.path).name.endswith("-my_file__1_.txt")

    def test_rejects_disallowed_type_without_writing(self, upload_dir):
        form = FormData([("file", _upload(b"MZ", "tool.exe", "application/x-msdownload"))])
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            asyncio.run(_store(upload_dir).accept(form))
        assert "File type not supported" in str(exc_info.value)
        assert list(upload_dir.iterdir()) == []

    def test_rejects_declared_oversize(self, upload_dir):
        form = FormData([("file", _upload(b"x" * 2048, "big.txt", "text/plain"))])
        with pytest.raises(FileTooLargeError):
            asyncio.run(_store(upload_dir, max_bytes=1024).accept(form))
        assert list(upload_dir.iterdir()) == []

    def test_rejects_undeclared_oversize_and_removes_partial(self, upload_dir):
        upload = _upload(b"x" * 4096, "big.txt", "text/plain", declare_size=False)
        with pytest.raises(FileTooLargeError) as exc_info:
            asyncio.run(_store(upload_dir, max_bytes=1024).accept(FormData([("file", upload)])))
        assert exc_info.value.limit_bytes == 1024
        assert list(upload_dir.iterdir()) == []

    def test_exact_limit_is_accepted(self, upload_dir):
        form = FormData([("file", _upload(b"x" * 1024, "edge.txt", "text/plain"))])
        stored = asyncio.run(_store(upload_dir, max_bytes=1024).accept(form))
        assert stored.size_bytes == 1024

    def test_chunks_are_written_off_the_event_loop(self, upload_dir, monkeypatch):
        from app.uploads import service

        writes = []
        real_run_in_threadpool = service.run_in_threadpool

        async def _recording(func, *args, **kwargs):
            writes.append(args[0])
            return await real_run_in_threadpool(func, *args, **kwargs)

        monkeypatch.setattr(service, "run_in_threadpool", _recording)
        monkeypatch.setattr(service, "CHUNK_SIZE", 4)

        form = FormData([("file", _upload(b"abcdefghij", "notes.txt", "text/plain"))])
        stored = asyncio.run(_store(upload_dir).accept(form))

        assert writes == [b"abcd", b"efgh", b"ij"]
        assert Path(stored.path).read_bytes() == b"abcdefghij"

    def test_rejects_file_under_other_field(self, upload_dir):
        form = FormData([("attachment", _upload(b"x", "a.txt", "text/plain"))])
        with pytest.raises(UploadLimitError, match="Unexpected field"):
            asyncio.run(_store(upload_dir).accept(form))

    def test_rejects_second_file(self, upload_dir):
        form = FormData([
            ("file", _upload(b"1", "a.txt", "text/plain")),
            ("file", _upload(b"2", "b.txt", "text/plain")),
        ])
        with pytest.raises(UploadLimitError):
            asyncio.run(_store(upload_dir).accept(form))
        assert list(upload_dir.iterdir()) == []


# ---------------------------------------------------------------------------
# UploadStore.remove
# ---------------------------------------------------------------------------


class TestUploadStoreRemove:
    def test_removes_stored_upload(self, upload_dir):
        store = _store(upload_dir)
        stored = asyncio.run(store.accept(FormData([("file", _upload(b"1", "a.txt", "text/plain"))])))
        assert store.remove(stored) is True
        assert not Path(stored.path).exists()

    def test_missing_file_is_noop(self, upload_dir):
        assert _store(upload_dir).remove(upload_dir / "gone.txt") is False

    def test_refuses_path_outside_temp_dir(self, tmp_path, upload_dir, caplog):
        outside = tmp_path / "keep.txt"
        outside.write_text("important")
        with caplog.at_level("ERROR"):
            assert _store(upload_dir).remove(outside) is False
        assert outside.exists()
        assert "outside temp directory" in caplog.text

    def test_refuses_traversal_path(self, tmp_path, upload_dir):
        outside = tmp_path / "keep.txt"
        outside.write_text("important")
        assert _store(upload_dir).remove(upload_dir / ".." / "keep.txt") is False
        assert outside.exists()

    def test_refuses_temp_dir_itself(self, upload_dir):
        assert _store(upload_dir).remove(upload_dir) is False
        assert upload_dir.is_dir()
