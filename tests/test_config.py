import pytest
from pydantic import ValidationError

from apollo_chat.config import Settings


def test_default_model_must_be_known(monkeypatch) -> None:
    monkeypatch.setenv("DEFAULT_MODEL", "gpt-4o")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_default_model_accepts_listed_option(monkeypatch) -> None:
    monkeypatch.setenv("DEFAULT_MODEL", "claude-opus-4-20250514")

    assert Settings(_env_file=None).default_model == "claude-opus-4-20250514"
