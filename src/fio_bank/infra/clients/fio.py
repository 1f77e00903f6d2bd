"""FIO Bank REST API client.

API reference: https://www.fio.cz/docs/cz/API_Bankovnictvi.pdf
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
import http.client
import json
from typing import Any, NoReturn, cast
import urllib.error
import urllib.parse
import urllib.request

from fio_bank.core.config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_SECONDS,
    FioConfig,
)
from fio_bank.errors import (
    FioClientError,
    InvalidRequest,
    MalformedResponse,
    RateLimited,
    ResponseTooLarge,
    TransportError,
    UpstreamError,
)
from fio_bank.infra.clients.fio_payload import normalize
from fio_bank.infra.clients.logger import FioClientLogger
from fio_bank.infra.clients.rate_limiter import RateLimiter
from fio_bank.models.statement import AccountStatement

_STATUS_ERRORS: dict[int, tuple[type[FioClientError], str]] = {
    404: (InvalidRequest, "Invalid URL or token"),
    409: (RateLimited, "Rate limit exceeded (wait 30 seconds)"),
    413: (ResponseTooLarge, "Too many transactions in response"),
    422: (InvalidRequest, "Invalid request data"),
    500: (UpstreamError, "Internal server error"),
}


def classify_status(status_code: int) -> FioClientError | None:
    """Map an HTTP status to a classified error, or None for 2xx."""
    if 200 <= status_code < 300:
        return None
    error_cls, message = _STATUS_ERRORS.get(
        status_code, (UpstreamError, f"HTTP error: {status_code}")
    )
    return error_cls(message, status_code)


# ---------------------------------------------------------------------------
# Result variant
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StatementFetched:
    """Successful fetch."""

    statement: AccountStatement

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> AccountStatement:
        return self.statement


@dataclass(frozen=True, slots=True)
class StatementFailed:
    """Classified fetch failure."""

    error: FioClientError

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise self.error


StatementResult = StatementFetched | StatementFailed


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def _format_date(value: date | str) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return value


class FioClient:
    def __init__(
        self,
        *,
        rate_limiter: RateLimiter | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        logger: FioClientLogger | None = None,
    ) -> None:
        self._logger = logger or FioClientLogger()
        self._rate_limiter = rate_limiter or RateLimiter(logger=self._logger)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    @classmethod
    def from_config(cls, config: FioConfig) -> FioClient:
        """Construct a FioClient with its own RateLimiter from config."""
        logger = FioClientLogger()
        return cls(
            rate_limiter=RateLimiter(config.rate_limit_seconds, logger=logger),
            base_url=config.base_url,
            timeout_seconds=config.timeout_seconds,
            logger=logger,
        )

    def _url(self, token: str, date_from: str, date_to: str) -> str:
        quoted = urllib.parse.quote(token, safe="")
        return (
            f"{self._base_url}/periods/{quoted}/{date_from}/{date_to}"
            "/transactions.json"
        )

    def _get(self, url: str) -> tuple[int, bytes]:
        """GET ``url`` and return status and body.

        Raises:
            FioClientError: Classified HTTP failure, or TransportError when
                no HTTP response was received.
        """
        req = urllib.request.Request(url, method="GET")  # noqa: S310
        try:
            with urllib.request.urlopen(  # noqa: S310 - external HTTPS
                req, timeout=self._timeout
            ) as resp:
                status = int(resp.status)
                body = cast(bytes, resp.read())
        except urllib.error.HTTPError as e:
            # Error bodies may not be JSON; they are not attached
            e.close()
            error = classify_status(e.code) or UpstreamError(
                f"HTTP error: {e.code}", e.code
            )
            self._logger.request_failed(error.status_code, error.message)
            raise error from e
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            self._logger.transport_failed(e)
            raise TransportError(f"Network error calling FIO API: {e}") from e

        error = classify_status(status)
        if error is not None:
            self._logger.request_failed(error.status_code, error.message)
            raise error
        return status, body

    def _parse_json_response(self, body: bytes, status: int) -> dict[str, Any]:
        """Decode the body, keeping amounts exact.

        Raises:
            MalformedResponse: If the body is not a JSON object.
        """
        try:
            data = json.loads(body.decode("utf-8"), parse_float=Decimal)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedResponse(
                f"Failed to parse FIO response as JSON: {e}", status
            ) from e
        if not isinstance(data, dict):
            raise MalformedResponse(
                f"Expected a JSON object, got {type(data).__name__}", status
            )
        return data

    def _fetch_json(
        self, token: str, date_from: date | str, date_to: date | str
    ) -> tuple[int, dict[str, Any]]:
        start, end = _format_date(date_from), _format_date(date_to)
        self._rate_limiter.acquire(token)
        self._logger.request_start(token, start, end)
        status, body = self._get(self._url(token, start, end))
        return status, self._parse_json_response(body, status)

    # High-level APIs -----------------------------------------------------

    def fetch_raw(
        self, token: str, date_from: date | str, date_to: date | str
    ) -> dict[str, Any]:
        """Return the decoded provider payload without normalizing it.

        Raises:
            FioClientError: On any classified failure.
        """
        _, payload = self._fetch_json(token, date_from, date_to)
        return payload

    def fetch_statement(
        self, token: str, date_from: date | str, date_to: date | str
    ) -> StatementResult:
        """Fetch and normalize the statement for a date range.

        Dates are ``YYYY-MM-DD``; strings are passed through unvalidated.
        Waits out the per-token cooldown first. No retries.

        Returns:
            StatementFetched on success, StatementFailed with the classified
            error otherwise.
        """
        try:
            status, payload = self._fetch_json(token, date_from, date_to)
            try:
                statement = normalize(payload)
            except MalformedResponse as e:
                raise MalformedResponse(e.message, status) from e
        except MalformedResponse as e:
            self._logger.malformed_response(e)
            return StatementFailed(e)
        except FioClientError as e:
            return StatementFailed(e)

        info = statement.info
        self._logger.statement_normalized(
            info.account_id,
            len(statement.transactions),
            info.date_start,
            info.date_end,
        )
        return StatementFetched(statement)
