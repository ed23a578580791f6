"""FastAPI dependencies exposing the objects built by ``create_app``."""
from typing import Optional

from fastapi import Depends, Request

from app.config import RelayConfig
from app.notifier.service import TelegramNotifier
from app.uploads.schemas import UploadedFile
from app.uploads.service import UploadStore


def get_relay_config(request: Request) -> RelayConfig:
    return request.app.state.config


def get_upload_store(request: Request) -> UploadStore:
    return request.app.state.upload_store


def get_notifier(request: Request) -> TelegramNotifier:
    return request.app.state.notifier


async def accept_upload(
    request: Request,
    store: UploadStore = Depends(get_upload_store),
) -> Optional[UploadedFile]:
    """Store the request's file part before the endpoint body runs.

    Size and type violations raise ``UploadError`` here, so the endpoint
    never sees a rejected file.
    """
    form = await request.form()
    return await store.accept(form)
