"""
Typed API errors.

Every provider failure is surfaced as an ApiError carrying a kind from a
closed set; each kind has exactly one user-facing message.
"""

from enum import Enum
from typing import Any, Optional

from stockchart.services.base import ExternalAPIError

DEFAULT_RETRY_AFTER = 60


class ApiErrorKind(str, Enum):
    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    INVALID_SYMBOL = "invalid_symbol"
    INVALID_API_KEY = "invalid_api_key"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNKNOWN = "unknown"


# Kinds that will fail the same way on every attempt
NON_RETRYABLE_KINDS = frozenset({ApiErrorKind.INVALID_API_KEY, ApiErrorKind.INVALID_SYMBOL})


class ApiError(ExternalAPIError):
    """Provider call failed."""

    def __init__(
        self,
        kind: ApiErrorKind,
        message: str,
        status_code: Optional[int] = None,
        retry_after: Optional[int] = None,
        service_name: str = "MarketData",
        details: Optional[dict] = None,
    ):
        super().__init__(service_name, message, details)
        self.kind = kind
        self.status_code = status_code
        self.retry_after = retry_after

    @property
    def retryable(self) -> bool:
        return self.kind not in NON_RETRYABLE_KINDS

    @property
    def user_message(self) -> str:
        return get_error_message(self)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            kind=self.kind.value,
            status_code=self.status_code,
            retry_after=self.retry_after,
            message=self.user_message,
        )
        return data

    @classmethod
    def from_status(
        cls,
        status: int,
        retry_after_header: Optional[str] = None,
        service_name: str = "MarketData",
    ) -> "ApiError":
        """Map a non-200 HTTP status to an ApiError."""
        if status == 401:
            return cls(ApiErrorKind.UNAUTHORIZED, "Unauthorized", status, service_name=service_name)
        if status == 403:
            return cls(ApiErrorKind.FORBIDDEN, "Forbidden", status, service_name=service_name)
        if status == 404:
            return cls(ApiErrorKind.NOT_FOUND, "Not found", status, service_name=service_name)
        if status == 429:
            return cls(
                ApiErrorKind.RATE_LIMIT,
                "Too many requests",
                status,
                retry_after=parse_retry_after(retry_after_header),
                service_name=service_name,
            )
        if 500 <= status < 600:
            return cls(ApiErrorKind.SERVER_ERROR, f"Server error {status}", status, service_name=service_name)
        return cls(ApiErrorKind.UNKNOWN, f"Unexpected status {status}", status, service_name=service_name)


def parse_retry_after(value: Optional[str]) -> int:
    """Retry-After seconds, defaulting to 60 when missing or not an integer."""
    if value is None:
        return DEFAULT_RETRY_AFTER
    try:
        seconds = int(str(value).strip())
    except ValueError:
        return DEFAULT_RETRY_AFTER
    return seconds if seconds >= 0 else DEFAULT_RETRY_AFTER


def check_in_band_error(payload: Any, service_name: str = "AlphaVantage") -> Optional[ApiError]:
    """
    Detect an error carried in an HTTP-200 Alpha Vantage body.

    Returns the ApiError, or None when the payload is usable.
    """
    if not isinstance(payload, dict):
        return ApiError(ApiErrorKind.UNKNOWN, "Unexpected response payload", service_name=service_name)

    if "Note" in payload:
        return ApiError(
            ApiErrorKind.RATE_LIMIT,
            str(payload["Note"]),
            retry_after=DEFAULT_RETRY_AFTER,
            service_name=service_name,
        )

    if "Error Message" in payload:
        message = str(payload["Error Message"])
        if "Invalid API call" in message:
            kind = ApiErrorKind.INVALID_SYMBOL
        elif "apikey" in message:
            kind = ApiErrorKind.INVALID_API_KEY
        else:
            kind = ApiErrorKind.UNKNOWN
        return ApiError(kind, message, service_name=service_name)

    if "Information" in payload:
        return ApiError(
            ApiErrorKind.RATE_LIMIT,
            str(payload["Information"]),
            retry_after=DEFAULT_RETRY_AFTER,
            service_name=service_name,
        )

    return None


def get_error_message(error: BaseException) -> str:
    """Human-readable message for any error raised by the data layer."""
    if not isinstance(error, ApiError):
        return "An unexpected error occurred. Please try again."

    if error.kind == ApiErrorKind.NETWORK:
        return "Unable to connect to the server. Please check your internet connection and try again."
    if error.kind == ApiErrorKind.RATE_LIMIT:
        return (
            "API rate limit exceeded. Please wait "
            f"{error.retry_after or DEFAULT_RETRY_AFTER} seconds before trying again."
        )
    if error.kind == ApiErrorKind.INVALID_SYMBOL:
        return "Invalid stock symbol. Please check the symbol and try again."
    if error.kind == ApiErrorKind.INVALID_API_KEY:
        return "Invalid API key. Please check your configuration."
    if error.kind == ApiErrorKind.UNAUTHORIZED:
        return "API authentication failed. Please check your API key configuration."
    if error.kind == ApiErrorKind.FORBIDDEN:
        return "Access denied. Your API plan may not include this data."
    if error.kind == ApiErrorKind.NOT_FOUND:
        return "The requested data was not found."
    if error.kind == ApiErrorKind.SERVER_ERROR:
        return "The server encountered an error. Please try again later."
    return "An unexpected error occurred. Please try again."
