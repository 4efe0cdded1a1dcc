"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from connwatch.config import reset_default_values
from tests.helpers.http_fakes import FakeClock, RecordingSleep


@pytest.fixture(autouse=True)
def _isolate_env_defaults(monkeypatch, tmp_path):
    """Keep a developer's .env out of tests."""
    monkeypatch.setattr("connwatch.config.runtime._DOTENV_CANDIDATES", (tmp_path / ".env",))
    reset_default_values()
    yield
    reset_default_values()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
