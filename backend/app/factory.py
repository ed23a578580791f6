"""Application factory for the contact relay.

Building an app here has no process-wide side effects: logging setup and the
module-level ASGI instance live in ``app.main``.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI

from app.config import RelayConfig, load_config
from app.notifier.service import TelegramNotifier
from app.relay import register_error_handlers
from app.relay import router as relay_router
from app.uploads.service import UploadStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    config: RelayConfig = app.state.config

    # Apply configured log level to root logger so that
    # `logging.level: "debug"` in relay.settings.yaml activates DEBUG output.
    configured_level = getattr(logging, config.logging.level.upper(), None)
    if isinstance(configured_level, int):
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", config.logging.level.upper())

    missing = config.missing_secrets()
    if missing:
        logger.warning(
            "Telegram secrets not configured (%s); relay requests will fail",
            ", ".join(missing),
        )
    logger.info("Uploads are staged in %s", app.state.upload_store.temp_dir)

    yield  # Application runs here

    logger.info("Application shutdown complete")


def create_app(
    config: Optional[RelayConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Build the relay application.

    Args:
        config: Settings to use; loaded from the YAML files when omitted.
        transport: Optional httpx transport for the Bot API client (tests).
    """
    config = config or load_config()

    app = FastAPI(
        title="Contact Relay API",
        description="Relays contact-form submissions and uploads to Telegram",
        version="0.1.0",
        lifespan=lifespan,
    )

    upload_store = UploadStore(
        temp_dir=config.uploads.temp_dir,
        max_file_size_bytes=config.uploads.max_file_size_bytes,
        allowed_mime_types=config.uploads.allowed_mime_types,
    )
    app.state.config = config
    app.state.upload_store = upload_store
    app.state.notifier = TelegramNotifier(
        bot_token=config.bot_token,
        upload_root=upload_store.temp_dir,
        api_base_url=config.telegram.api_base_url,
        timeout_seconds=config.telegram.timeout_seconds,
        transport=transport,
    )

    register_error_handlers(app)
    app.include_router(relay_router)

    @app.get("/health")
    async def health() -> dict:
        """Health check endpoint.

        Returns:
            dict: Status object indicating the server is running.
        """
        return {"status": "ok"}

    return app
