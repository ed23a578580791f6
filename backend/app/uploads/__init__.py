"""Upload handling for the relay.

Accepts a single multipart file, enforces the size limit and MIME
allow-list, and keeps the file in a temp directory only for the duration
of one request.
"""

from .errors import (
    FileTooLargeError,
    UnsupportedFileTypeError,
    UploadError,
    UploadLimitError,
)
from .guard import PathGuardError, is_within
from .schemas import UploadedFile
from .service import UploadStore

__all__ = [
    "FileTooLargeError",
    "PathGuardError",
    "UnsupportedFileTypeError",
    "UploadError",
    "UploadLimitError",
    "UploadStore",
    "UploadedFile",
    "is_within",
]
