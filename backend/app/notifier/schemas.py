"""Result of a single Telegram Bot API call."""
from typing import Any, Dict

from pydantic import BaseModel, Field


class NotificationResult(BaseModel):
    """Parsed Bot API response.

    ``ok`` mirrors the API's own ``ok`` flag and drives the HTTP status the
    relay answers with; ``raw`` keeps the whole response for logging.
    """
    ok: bool = False
    raw: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "NotificationResult":
        if not isinstance(payload, dict):
            return cls(ok=False, raw={"body": payload})
        return cls(ok=payload.get("ok") is True, raw=payload)
