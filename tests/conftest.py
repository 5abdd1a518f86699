from __future__ import annotations

import pytest

from babylon.infrastructure.config.config_manager import ENV_OVERRIDES


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep host environment variables out of configuration loading"""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sleeps():
    """Fake sleep that records requested delays instead of waiting"""
    delays: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    fake_sleep.delays = delays  # type: ignore[attr-defined]
    return fake_sleep
