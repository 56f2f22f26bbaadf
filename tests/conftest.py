"""Global test fixtures for rwrsgateway."""

from __future__ import annotations

import pytest

from rwrsgateway.config import ENV_VARS


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    """Keep the developer's gateway env vars out of every test."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
