"""Telegram Bot API client used to deliver relay notifications.

Two message shapes are supported:
  * ``sendMessage`` — JSON body, HTML parse mode
  * ``sendPhoto`` / ``sendDocument`` — multipart body with file + caption

Each call is a single attempt with an explicit timeout.  API-level
failures come back as ``NotificationResult(ok=False)``; transport errors
(``httpx.HTTPError``) propagate to the caller.
"""
import logging
from pathlib import Path
from typing import Optional, Union

import httpx

from app.uploads.guard import PathGuardError, is_within
from app.uploads.schemas import UploadedFile

from .schemas import NotificationResult

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Sends text and file notifications to a Telegram chat."""

    PARSE_MODE = "HTML"

    def __init__(
        self,
        bot_token: Optional[str],
        upload_root: Union[str, Path],
        api_base_url: str = "https://api.telegram.org",
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.bot_token = bot_token
        self.upload_root = Path(upload_root)
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def _method_url(self, method: str) -> str:
        return f"{self.api_base_url}/bot{self.bot_token}/{method}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_seconds,
            transport=self._transport,
        )

    async def send_text(self, chat_id: str, html_text: str) -> NotificationResult:
        """Send an HTML-formatted text message.

        Returns:
            NotificationResult parsed from the API response.
        """
        async with self._client() as client:
            resp = await client.post(
                self._method_url("sendMessage"),
                json={
                    "chat_id": chat_id,
                    "text": html_text,
                    "parse_mode": self.PARSE_MODE,
                },
            )
        return NotificationResult.from_payload(resp.json())

    async def send_file(
        self,
        chat_id: str,
        upload: UploadedFile,
        caption: str,
        is_image: bool,
    ) -> NotificationResult:
        """Send a stored upload with an optional HTML caption.

        Images go through ``sendPhoto``, everything else through
        ``sendDocument``.

        Raises:
            PathGuardError: If the upload path is outside the temp directory.
        """
        if not is_within(upload.path, self.upload_root):
            logger.error("Refusing to read file outside temp directory: %s", upload.path)
            raise PathGuardError("Invalid file path")

        method, field = ("sendPhoto", "photo") if is_image else ("sendDocument", "document")
        data = {"chat_id": chat_id}
        if caption:
            data["caption"] = caption
            data["parse_mode"] = self.PARSE_MODE

        with open(upload.path, "rb") as fh:
            async with self._client() as client:
                resp = await client.post(
                    self._method_url(method),
                    data=data,
                    files={field: (upload.original_name, fh, upload.mime_type)},
                )
        return NotificationResult.from_payload(resp.json())
