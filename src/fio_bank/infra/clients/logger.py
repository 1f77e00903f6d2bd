"""Logging for the FIO statement client.

Keeps log calls out of the request and normalization code.
"""

from __future__ import annotations

from datetime import date

import loguru
from loguru import logger


def mask_token(token: str) -> str:
    """Return a log-safe form of an API token."""
    if len(token) <= 4:
        return "***"
    return f"{token[:4]}..."


class FioClientLogger:
    """Handles all logging for FioClient and RateLimiter."""

    def __init__(self, logger_instance: loguru.Logger = logger) -> None:
        self._logger = logger_instance

    def request_start(self, token: str, date_from: str, date_to: str) -> None:
        """Log an outbound statement request."""
        self._logger.bind(
            token=mask_token(token), date_from=date_from, date_to=date_to
        ).info("Fetching FIO statement {} to {}", date_from, date_to)

    def cooldown_wait(self, token: str, seconds: float) -> None:
        """Log a rate limit cooldown wait."""
        self._logger.bind(token=mask_token(token), wait_seconds=seconds).info(
            "Rate limit cooldown for {}: waiting {:.1f}s", mask_token(token), seconds
        )

    def request_failed(self, status_code: int | None, message: str) -> None:
        """Log a classified HTTP failure."""
        self._logger.bind(status_code=status_code).warning(
            "FIO API request failed ({}): {}", status_code, message
        )

    def transport_failed(self, error: Exception) -> None:
        """Log a network-level failure."""
        self._logger.bind(error=str(error)).warning(
            "Network error calling FIO API: {}", error
        )

    def malformed_response(self, error: Exception) -> None:
        """Log a response body that could not be normalized."""
        self._logger.bind(error=str(error)).warning(
            "Malformed FIO API response: {}", error
        )

    def statement_normalized(
        self,
        account_id: str,
        transaction_count: int,
        date_start: date | None,
        date_end: date | None,
    ) -> None:
        """Log a successfully normalized statement."""
        self._logger.bind(
            account_id=account_id, transactions=transaction_count
        ).info(
            "Statement for account {} ({} to {}): {} transactions",
            account_id,
            date_start,
            date_end,
            transaction_count,
        )
