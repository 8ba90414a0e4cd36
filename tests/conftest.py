"""Shared pytest fixtures."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("THROTTLE_DELAY", "0")

from apollo_chat.config import Settings, get_settings  # noqa: E402
from apollo_chat.main import create_app  # noqa: E402


@pytest.fixture(autouse=True)
def configure_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("THROTTLE_DELAY", "0")
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def app():
    return create_app()


class StubMessagesClient:
    """Records payloads and replays canned responses or exceptions."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.payloads: list[dict[str, Any]] = []

    async def create_message(self, payload: dict[str, Any]) -> Any:
        self.payloads.append(payload)
        response = self.responses.pop(0) if self.responses else {"content": [{"text": "ok"}]}
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def stub_client() -> StubMessagesClient:
    return StubMessagesClient()
