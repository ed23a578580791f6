"""Contact relay endpoints.

Endpoints:
    POST /send-message  - JSON contact form, relayed as a text message
    POST /send-file     - multipart form with an optional file, relayed as
                          a photo/document with caption (or text if no file)

Every response is ``{"success": bool, "message": str}``.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form
from fastapi.responses import JSONResponse

from app.config import RelayConfig
from app.notifier.service import TelegramNotifier
from app.sanitizer import sanitize
from app.uploads.schemas import UploadedFile
from app.uploads.service import UploadStore

from . import messages
from .dependencies import accept_upload, get_notifier, get_relay_config, get_upload_store
from .errors import error_response, relay_response
from .schemas import ContactMessage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["relay"])

CONFIG_ERROR_MESSAGE = "Server configuration error. Please contact administrator."
MESSAGE_SENT = "Message sent successfully!"
MESSAGE_FAILED = "Failed to send message. Please try again."
FILE_SENT = "File and information sent successfully!"
FILE_FAILED = "Failed to send file. Please try again."


def _config_error(config: RelayConfig) -> Optional[JSONResponse]:
    """Return a 500 response if the Telegram secrets are not configured."""
    missing = config.missing_secrets()
    if not missing:
        return None
    # Which secret is missing stays in the server log
    logger.error("Missing Telegram credentials: %s", ", ".join(missing))
    return relay_response(False, CONFIG_ERROR_MESSAGE, 500)


@router.post("/send-message")
async def send_message(
    payload: Optional[ContactMessage] = None,
    config: RelayConfig = Depends(get_relay_config),
    notifier: TelegramNotifier = Depends(get_notifier),
) -> JSONResponse:
    """Relay a contact form submission as a Telegram text message."""
    payload = payload or ContactMessage()
    try:
        if not payload.name or not payload.email or not payload.message:
            return relay_response(False, "Name, email, and message are required.", 400)

        config_error = _config_error(config)
        if config_error is not None:
            return config_error

        text = messages.contact_message(
            sanitize(payload.name),
            sanitize(payload.email),
            sanitize(payload.message),
        )
        result = await notifier.send_text(config.chat_id, text)

        if result.ok:
            logger.info("[send-message] Relayed contact message")
            return relay_response(True, MESSAGE_SENT)
        logger.error("[send-message] Telegram API error: %s", result.raw)
        return relay_response(False, MESSAGE_FAILED, 500)
    except Exception as exc:
        logger.error("Error in /send-message: %s", exc, exc_info=True)
        return error_response(exc, "An error occurred while sending your message.")


@router.post("/send-file")
async def send_file(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    explanation: Optional[str] = Form(None),
    upload: Optional[UploadedFile] = Depends(accept_upload),
    config: RelayConfig = Depends(get_relay_config),
    notifier: TelegramNotifier = Depends(get_notifier),
    store: UploadStore = Depends(get_upload_store),
) -> JSONResponse:
    """Relay a submission with an optional file.

    Without a file this behaves like ``/send-message``, using
    ``explanation`` as the message body.  A stored upload is always
    removed before the response is returned.
    """
    try:
        if not name or not email:
            return relay_response(False, "Name and email are required.", 400)

        config_error = _config_error(config)
        if config_error is not None:
            return config_error

        safe_name = sanitize(name)
        safe_email = sanitize(email)
        safe_explanation = sanitize(explanation)

        if upload is not None:
            caption = messages.file_caption(safe_name, safe_email, safe_explanation)
            result = await notifier.send_file(
                config.chat_id, upload, caption, upload.is_image
            )
            if result.ok:
                logger.info(
                    "[send-file] Relayed %s (%d bytes)", upload.original_name, upload.size_bytes
                )
                return relay_response(True, FILE_SENT)
            logger.error("[send-file] Telegram API error: %s", result.raw)
            return relay_response(False, FILE_FAILED, 500)

        text = messages.submission_without_file(safe_name, safe_email, safe_explanation)
        result = await notifier.send_text(config.chat_id, text)
        if result.ok:
            logger.info("[send-file] Relayed submission without file")
            return relay_response(True, MESSAGE_SENT)
        logger.error("[send-file] Telegram API error: %s", result.raw)
        return relay_response(False, MESSAGE_FAILED, 500)
    except Exception as exc:
        logger.error("Error in /send-file: %s", exc, exc_info=True)
        return error_response(exc, "An error occurred while processing your request.")
    finally:
        if upload is not None:
            store.remove(upload)
