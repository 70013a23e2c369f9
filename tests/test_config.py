from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.config import AppSettings, get_user_env_file, write_user_env_vars


def test_defaults():
    settings = AppSettings()
    assert settings.api_key is None
    assert settings.base_url == "https://api.anymailfinder.com"
    assert settings.continue_on_fail is False
    assert settings.max_concurrency == 1
    assert settings.http_timeout_seconds == 30.0


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("ANYMAILFINDER_API_KEY", "from-env")
    monkeypatch.setenv("ANYMAILFINDER_CONTINUE_ON_FAIL", "true")
    monkeypatch.setenv("ANYMAILFINDER_HTTP_TIMEOUT_SECONDS", "5")

    settings = AppSettings()

    assert settings.api_key == "from-env"
    assert settings.continue_on_fail is True
    assert settings.http_timeout_seconds == 5.0


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        AppSettings(http_timeout_seconds=0)
    with pytest.raises(ValidationError):
        AppSettings(max_concurrency=0)


def test_write_user_env_vars_merges(tmp_path):
    path = write_user_env_vars({"ANYMAILFINDER_API_KEY": "one", "ANYMAILFINDER_AUTH_SCHEME": None})
    assert path == get_user_env_file()
    assert path.is_relative_to(tmp_path)

    write_user_env_vars({"ANYMAILFINDER_BASE_URL": "https://example.test"})

    text = path.read_text(encoding="utf-8")
    assert "ANYMAILFINDER_API_KEY=one" in text
    assert "ANYMAILFINDER_BASE_URL=https://example.test" in text
    assert "AUTH_SCHEME" not in text
