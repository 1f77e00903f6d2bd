"""Error taxonomy for the FIO Bank client.

Exception hierarchy:
    FioError
    ├── ConfigurationError      missing credential or invalid setting
    └── FioClientError          a failed statement fetch
        ├── InvalidRequest      404 / 422
        ├── RateLimited         409
        ├── ResponseTooLarge    413
        ├── UpstreamError       500 / any other non-2xx
        ├── MalformedResponse   2xx body that cannot be decoded or traversed
        └── TransportError      network, DNS, TLS or timeout failure
"""

from __future__ import annotations

import enum


class FioErrorKind(enum.Enum):
    """Classified kind of a failed statement fetch."""

    INVALID_REQUEST = "invalid_request"
    RATE_LIMITED = "rate_limited"
    RESPONSE_TOO_LARGE = "response_too_large"
    UPSTREAM_ERROR = "upstream_error"
    MALFORMED_RESPONSE = "malformed_response"
    TRANSPORT_ERROR = "transport_error"


class FioError(Exception):
    """Base error for everything raised by this package."""


class ConfigurationError(FioError):
    """Missing or invalid local configuration. Never sent over the wire."""


class FioClientError(FioError):
    """Base error for a classified statement fetch failure."""

    kind: FioErrorKind = FioErrorKind.UPSTREAM_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )


class InvalidRequest(FioClientError):
    kind = FioErrorKind.INVALID_REQUEST


class RateLimited(FioClientError):
    kind = FioErrorKind.RATE_LIMITED


class ResponseTooLarge(FioClientError):
    kind = FioErrorKind.RESPONSE_TOO_LARGE


class UpstreamError(FioClientError):
    kind = FioErrorKind.UPSTREAM_ERROR


class MalformedResponse(FioClientError):
    kind = FioErrorKind.MALFORMED_RESPONSE


class TransportError(FioClientError):
    kind = FioErrorKind.TRANSPORT_ERROR
