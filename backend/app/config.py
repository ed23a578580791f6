"""Contact relay configuration.

Loads settings from two YAML files:
  * relay.settings.yaml  — non-secret configuration
  * relay.secrets.yaml   — bot token and destination chat (never committed)

``TELEGRAM_BOT_TOKEN`` / ``TELEGRAM_CHAT_ID`` in the environment take
precedence over the secrets file.  The resulting ``RelayConfig`` is frozen;
it is built once when the application is created and never mutated.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SETTINGS_FILE = Path("relay.settings.yaml")
SECRETS_FILE  = Path("relay.secrets.yaml")

DEFAULT_ALLOWED_MIME_TYPES: Tuple[str, ...] = (
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "application/zip",
    "application/x-rar-compressed",
    "video/mp4",
    "video/mpeg",
    "video/quicktime",
    "audio/mpeg",
    "audio/wav",
    "audio/ogg",
)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning("Config file not found: %s", path)
        return {}
    with path.open(encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


# ---------------------------------------------------------------------------
# Secrets models
# ---------------------------------------------------------------------------


class TelegramSecrets(BaseModel):
    model_config = ConfigDict(frozen=True)

    bot_token: Optional[str] = None
    chat_id:   Optional[str] = None

    @field_validator("chat_id", mode="before")
    @classmethod
    def _chat_id_as_str(cls, value: Any) -> Any:
        # YAML reads numeric chat ids (e.g. -100123...) as ints
        if isinstance(value, int):
            return str(value)
        return value


class Secrets(BaseModel):
    model_config = ConfigDict(frozen=True)

    telegram: TelegramSecrets = Field(default_factory=TelegramSecrets)


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class UploadSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    temp_dir:           str             = str(Path(tempfile.gettempdir()) / "contact-relay-uploads")
    max_file_size_mb:   int             = Field(20, gt=0)
    allowed_mime_types: Tuple[str, ...] = DEFAULT_ALLOWED_MIME_TYPES

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


class TelegramSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_base_url:    str   = "https://api.telegram.org"
    timeout_seconds: float = Field(30.0, gt=0)

    @field_validator("api_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class LoggingSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = "info"


class RelayConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    uploads:  UploadSettings   = Field(default_factory=UploadSettings)
    telegram: TelegramSettings = Field(default_factory=TelegramSettings)
    logging:  LoggingSettings  = Field(default_factory=LoggingSettings)
    secrets:  Secrets          = Field(default_factory=Secrets)

    @property
    def bot_token(self) -> Optional[str]:
        return self.secrets.telegram.bot_token

    @property
    def chat_id(self) -> Optional[str]:
        return self.secrets.telegram.chat_id

    def missing_secrets(self) -> List[str]:
        """Names of the Telegram secrets that are not configured."""
        missing = []
        if not self.bot_token:
            missing.append("bot_token")
        if not self.chat_id:
            missing.append("chat_id")
        return missing


# ---------------------------------------------------------------------------
# Environment overrides
# ---------------------------------------------------------------------------

_ENV_SECRETS = {
    "TELEGRAM_BOT_TOKEN": "bot_token",
    "TELEGRAM_CHAT_ID":   "chat_id",
}


def _apply_env_secrets(secrets_data: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay Telegram secrets from the environment onto the secrets file."""
    telegram = dict(secrets_data.get("telegram") or {})
    for env_name, key in _ENV_SECRETS.items():
        value = os.environ.get(env_name, "").strip()
        if value:
            telegram[key] = value
            logger.debug("Using %s from environment", env_name)
    merged = dict(secrets_data)
    merged["telegram"] = telegram
    return merged


def _resolve_temp_dir(settings_data: Dict[str, Any], settings_path: Path) -> None:
    """Resolve a relative uploads.temp_dir against the settings file directory."""
    uploads = settings_data.get("uploads")
    if not isinstance(uploads, dict) or not uploads.get("temp_dir"):
        return
    temp_dir = Path(uploads["temp_dir"]).expanduser()
    if not temp_dir.is_absolute():
        temp_dir = settings_path.resolve().parent / temp_dir
    uploads["temp_dir"] = str(temp_dir)


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------


def load_config(
    settings_path: Optional[Path] = None,
    secrets_path: Optional[Path] = None,
) -> RelayConfig:
    """Load and merge settings + secrets into a single *RelayConfig* object."""
    settings_path = Path(
        settings_path or os.environ.get("RELAY_SETTINGS_FILE") or SETTINGS_FILE
    )
    secrets_path = Path(
        secrets_path or os.environ.get("RELAY_SECRETS_FILE") or SECRETS_FILE
    )

    settings_data = _load_yaml(settings_path)
    secrets_data  = _load_yaml(secrets_path)

    _resolve_temp_dir(settings_data, settings_path)

    # Merge: secrets live under the "secrets" key in RelayConfig
    settings_data["secrets"] = _apply_env_secrets(secrets_data)

    config = RelayConfig(**settings_data)
    logger.info(
        "Settings loaded (temp_dir=%s, max_upload=%sMB, telegram_configured=%s)",
        config.uploads.temp_dir,
        config.uploads.max_file_size_mb,
        not config.missing_secrets(),
    )
    return config
