"""Outbound notifications to the Telegram Bot API."""

from .schemas import NotificationResult
from .service import TelegramNotifier

__all__ = ["NotificationResult", "TelegramNotifier"]
