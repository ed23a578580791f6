"""Shared test fixtures and configuration for backend tests."""
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from app.config import RelayConfig
from app.factory import create_app


class FakeTelegramAPI:
    """Stands in for the Bot API behind an ``httpx.MockTransport``.

    Records every outbound request and answers with ``payload``, or with
    ``response`` when set.  Setting ``error`` simulates a transport failure.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.payload: Any = {"ok": True, "result": {"message_id": 1}}
        self.status_code = 200
        self.error: Optional[Exception] = None
        self.response: Optional[httpx.Response] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.response is not None:
            return self.response
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def methods(self) -> List[str]:
        return [r.url.path.rsplit("/", 1)[-1] for r in self.requests]


def make_config(upload_dir: Path, **overrides: Any) -> RelayConfig:
    data: Dict[str, Any] = {
        "uploads": {"temp_dir": str(upload_dir)},
        "secrets": {"telegram": {"bot_token": "123:TEST", "chat_id": "-1001"}},
    }
    data.update(overrides)
    return RelayConfig(**data)


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def telegram_api() -> FakeTelegramAPI:
    return FakeTelegramAPI()


@pytest.fixture
def relay_config(upload_dir: Path) -> RelayConfig:
    return make_config(upload_dir)


@pytest.fixture
def api_client(relay_config: RelayConfig, telegram_api: FakeTelegramAPI) -> TestClient:
    """Provide a TestClient for a relay app wired to the fake Bot API."""
    app = create_app(relay_config, transport=telegram_api.transport)
    return TestClient(app)


@pytest.fixture
def client_factory(upload_dir: Path, telegram_api: FakeTelegramAPI):
    """Build a TestClient with config overrides, e.g. a smaller upload limit."""

    def _make(**overrides: Any) -> TestClient:
        config = make_config(upload_dir, **overrides)
        return TestClient(create_app(config, transport=telegram_api.transport))

    return _make
