"""Upload rejection errors.

All of these are client errors: the Error Mapper turns them into 400
responses.
"""


class UploadError(Exception):
    """Base class for a rejected multipart upload."""


class FileTooLargeError(UploadError):
    """The uploaded file exceeds the configured size limit."""

    def __init__(self, limit_bytes: int):
        self.limit_bytes = limit_bytes
        super().__init__("File too large")

    @property
    def limit_mb(self) -> int:
        return self.limit_bytes // (1024 * 1024)


class UnsupportedFileTypeError(UploadError):
    """The declared MIME type is not in the allow-list."""

    def __init__(self, mime_type: str):
        self.mime_type = mime_type
        super().__init__(
            "File type not supported. Please upload images, documents, "
            "or common media files."
        )


class UploadLimitError(UploadError):
    """The request carries file parts the endpoint does not accept."""
