"""Common test fixtures and configuration for pytest."""

from typing import List

import pytest

from dpcheck.core.context import TestContext
from tests.fixtures.driver import FakeDriver


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the developer's dashboard settings out of the tests."""
    for key in ("DPCHECK_ENV", "BASE_URL", "API_URL", "USERNAME", "PASSWORD"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def context() -> TestContext:
    return TestContext()


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


class SleepRecorder:
    """Stands in for asyncio.sleep and records the requested delays (seconds)."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def payload_file(tmp_path):
    """Write a payload fixture and return its path."""

    def _write(content: str, name: str = "payload.json"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
