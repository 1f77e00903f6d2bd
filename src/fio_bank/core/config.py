from __future__ import annotations

from dataclasses import dataclass
import os

from fio_bank.errors import ConfigurationError

DEFAULT_BASE_URL = "https://fioapi.fio.cz/v1/rest"
DEFAULT_TIMEOUT_SECONDS = 30.0
# Provider quota: one request per 30 seconds per token.
DEFAULT_RATE_LIMIT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class FioConfig:
    """Client configuration loaded at process startup."""

    token: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    rate_limit_seconds: float = DEFAULT_RATE_LIMIT_SECONDS


def _float_from_env(name: str, default: float, *, allow_zero: bool) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value < 0 or (value == 0 and not allow_zero):
        bound = "non-negative" if allow_zero else "positive"
        raise ConfigurationError(f"{name} must be {bound}, got {raw!r}")
    return value


def load_fio_config_from_env() -> FioConfig:
    """Load client config from env.

    Optional env vars: FIO_API_TOKEN, FIO_API_BASE_URL, FIO_TIMEOUT_SECONDS,
    FIO_RATE_LIMIT_SECONDS.

    Raises:
        ConfigurationError: If a numeric setting is not a valid number.
    """
    token = os.environ.get("FIO_API_TOKEN", "").strip() or None
    base_url = os.environ.get("FIO_API_BASE_URL", "").strip() or DEFAULT_BASE_URL

    return FioConfig(
        token=token,
        base_url=base_url.rstrip("/"),
        timeout_seconds=_float_from_env(
            "FIO_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS, allow_zero=False
        ),
        rate_limit_seconds=_float_from_env(
            "FIO_RATE_LIMIT_SECONDS", DEFAULT_RATE_LIMIT_SECONDS, allow_zero=True
        ),
    )


def resolve_token(provided: str | None, config: FioConfig) -> str:
    """Return the explicit token, else the configured default.

    Raises:
        ConfigurationError: If neither is set.
    """
    token = provided or config.token
    if not token:
        raise ConfigurationError(
            "No API token. Pass token parameter or set FIO_API_TOKEN env var."
        )
    return token
