"""Shared test fixtures."""

from __future__ import annotations

import pytest

_FIO_ENV_VARS = (
    "FIO_API_TOKEN",
    "FIO_API_BASE_URL",
    "FIO_TIMEOUT_SECONDS",
    "FIO_RATE_LIMIT_SECONDS",
)


@pytest.fixture(autouse=True)
def _clear_fio_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove FIO_* settings so a developer's .env cannot leak into tests."""
    for name in _FIO_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
