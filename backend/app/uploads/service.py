"""Temp-directory storage for relay uploads.

Files are stored as ``<temp_dir>/<epoch-ms>-<random>-<safe name>`` so
concurrent uploads never collide, and are removed again as soon as the
relay attempt is over.  Every delete goes through the path guard.
"""
import logging
import os
import re
import time
import uuid
from pathlib import Path
from typing import Iterable, Optional, Union

from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData
from starlette.datastructures import UploadFile as StarletteUploadFile

from .errors import FileTooLargeError, UnsupportedFileTypeError, UploadLimitError
from .guard import is_within
from .schemas import CHUNK_SIZE, FILE_FIELD, UploadedFile

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^\w\-.]")


def _safe_name(filename: str) -> str:
    """Strip directory parts and replace anything outside [\\w-.] with '_'."""
    base = Path(filename.replace("\\", "/")).name
    return _UNSAFE_NAME_CHARS.sub("_", base) or "upload"


class UploadStore:
    """Accepts at most one file per request and keeps it in *temp_dir*."""

    def __init__(
        self,
        temp_dir: Union[str, Path],
        max_file_size_bytes: int,
        allowed_mime_types: Iterable[str],
    ) -> None:
        self.temp_dir = Path(temp_dir).resolve()
        self.max_file_size_bytes = max_file_size_bytes
        self.allowed_mime_types = frozenset(allowed_mime_types)
        self._ensure_temp_dir()

    def _ensure_temp_dir(self) -> None:
        self.temp_dir.mkdir(parents=True, exist_ok=True)

    def _stored_path(self, filename: str) -> Path:
        stamp = int(time.time() * 1000)
        return self.temp_dir / f"{stamp}-{uuid.uuid4().hex[:12]}-{_safe_name(filename)}"

    # ------------------------------------------------------------------
    # Accept
    # ------------------------------------------------------------------

    async def accept(self, form: FormData) -> Optional[UploadedFile]:
        """Validate and store the request's file part, if it has one.

        Returns:
            The stored UploadedFile, or None when no file was sent.

        Raises:
            UploadLimitError: A file arrived under another field, or more than one file.
            UnsupportedFileTypeError: MIME type is not allowed (nothing is written).
            FileTooLargeError: File exceeds the size limit (nothing is left on disk).
        """
        parts = [
            (key, value)
            for key, value in form.multi_items()
            if isinstance(value, StarletteUploadFile) and value.filename
        ]
        if not parts:
            return None
        if len(parts) > 1 or parts[0][0] != FILE_FIELD:
            raise UploadLimitError("Unexpected field")

        upload = parts[0][1]
        mime_type = upload.content_type or "application/octet-stream"
        if mime_type not in self.allowed_mime_types:
            logger.info("Rejected upload %r with type %s", upload.filename, mime_type)
            raise UnsupportedFileTypeError(mime_type)

        if upload.size is not None and upload.size > self.max_file_size_bytes:
            logger.info("Rejected upload %r: %d bytes", upload.filename, upload.size)
            raise FileTooLargeError(self.max_file_size_bytes)

        return await self._store(upload, mime_type)

    async def _store(self, upload: StarletteUploadFile, mime_type: str) -> UploadedFile:
        path = self._stored_path(upload.filename)
        size_bytes = 0
        try:
            with path.open("wb") as fh:
                while True:
                    chunk = await upload.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size_bytes += len(chunk)
                    if size_bytes > self.max_file_size_bytes:
                        raise FileTooLargeError(self.max_file_size_bytes)
                    await run_in_threadpool(fh.write, chunk)
        except BaseException:
            self.remove(path)
            raise
        finally:
            await upload.close()

        logger.info("Saved upload: %s (%d bytes, %s)", path.name, size_bytes, mime_type)
        return UploadedFile(
            path=str(path),
            original_name=upload.filename,
            mime_type=mime_type,
            size_bytes=size_bytes,
        )

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def remove(self, target: Union[UploadedFile, str, Path]) -> bool:
        """Delete an upload from the temp directory.

        Paths outside the temp directory are refused and logged.  Failures
        are logged, never raised.

        Returns:
            True if a file was deleted.
        """
        path = target.path if isinstance(target, UploadedFile) else os.fspath(target)
        if not is_within(path, self.temp_dir):
            logger.error("Refusing to remove file outside temp directory: %s", path)
            return False
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.error("Error removing upload %s: %s", path, exc)
            return False
        logger.debug("Removed upload: %s", path)
        return True
