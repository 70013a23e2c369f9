from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest


def pytest_configure():
    # Ensure src/ is on sys.path for absolute imports like 'core.services.dispatcher'
    src = Path(__file__).resolve().parents[1] / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for key in (
        "ANYMAILFINDER_API_KEY",
        "ANYMAILFINDER_BASE_URL",
        "ANYMAILFINDER_AUTH_SCHEME",
        "ANYMAILFINDER_CONTINUE_ON_FAIL",
        "ANYMAILFINDER_MAX_CONCURRENCY",
        "ANYMAILFINDER_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))


class FakeRequester:
    """Records calls; answers from `responses` keyed by path."""

    def __init__(self, responses: dict[str, Any] | None = None, default: Any = None) -> None:
        self.responses = responses or {}
        self.default = {"ok": True} if default is None else default
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []

    async def request_json(self, method: str, path: str, body: dict[str, Any] | None = None) -> Any:
        self.calls.append((method, path, body))
        answer = self.responses.get(path, self.default)
        if isinstance(answer, BaseException):
            raise answer
        if callable(answer):
            return answer(body)
        return answer

    async def __aenter__(self) -> "FakeRequester":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        return None


@pytest.fixture
def fake_requester():
    return FakeRequester
