"""Pydantic schema for an upload held in the temp directory.

An ``UploadedFile`` lives only for the duration of one request: it is
created when the multipart body is accepted and its file is deleted once
the relay attempt finishes, whatever the outcome.
"""
from pydantic import BaseModel, ConfigDict, Field

# Multipart field the relay reads the file from
FILE_FIELD = "file"

# Copy uploads to disk in 1 MiB chunks
CHUNK_SIZE = 1024 * 1024


class UploadedFile(BaseModel):
    """Metadata for a file stored under the temp directory."""
    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Absolute path inside the temp directory")
    original_name: str = Field(..., description="Filename as sent by the client")
    mime_type: str = Field(..., description="Declared MIME type")
    size_bytes: int = Field(..., ge=0, description="Stored size in bytes")

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")
