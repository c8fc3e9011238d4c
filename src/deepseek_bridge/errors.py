"""Error hierarchy for the DeepSeek bridge."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypedDict

if TYPE_CHECKING:
    from pydantic import ValidationError as PydanticValidationError


class Issue(TypedDict):
    """A single field-level problem found while validating input or config."""

    path: str
    message: str


class BridgeError(Exception):
    """Base error for all bridge errors."""

    def __init__(self, message: str, *, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ConfigurationError(BridgeError):
    """Startup configuration failed validation. Not recoverable."""

    def __init__(
        self,
        message: str,
        issues: list[Issue] | None = None,
        *,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.issues: list[Issue] = list(issues or [])


class ValidationError(BridgeError):
    """Caller-supplied input was rejected. Reported back as a tool error."""

    def __init__(
        self,
        message: str,
        issues: list[Issue] | None = None,
        *,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.issues = issues


# --- Upstream API errors ---


class ApiError(BridgeError):
    """Error returned by, or raised while talking to, the DeepSeek API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retryable: bool = False,
        raw: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.status_code = status_code
        self.retryable = retryable
        self.raw = raw


class RateLimitError(ApiError):
    """429 - Rate limit exceeded."""

    def __init__(
        self,
        message: str,
        *,
        retry_after: float | None = None,
        raw: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, status_code=429, retryable=True, raw=raw, cause=cause)
        self.retry_after = retry_after


class AuthenticationError(ApiError):
    """401 - Invalid API key."""

    def __init__(
        self,
        message: str,
        *,
        raw: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, status_code=401, retryable=False, raw=raw, cause=cause)


class APIConnectionError(BridgeError):
    """Network-level failure: DNS, timeout, connection reset."""

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = True,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.retryable = retryable


# --- Factories ---

_RETRYABLE_STATUS = {408}


def error_from_status_code(
    *,
    status_code: int,
    message: str,
    retry_after: float | None = None,
    raw: dict[str, Any] | None = None,
) -> ApiError:
    """Create the appropriate error type from an HTTP status code and message."""
    if status_code == 401:
        return AuthenticationError(message, raw=raw)
    if status_code == 429:
        return RateLimitError(message, retry_after=retry_after, raw=raw)
    return ApiError(
        message,
        status_code=status_code,
        retryable=status_code in _RETRYABLE_STATUS or status_code >= 500,
        raw=raw,
    )


def wrap_api_error(context: str, error: BaseException) -> ApiError:
    """Wrap any failure raised during an API call as an ApiError.

    The message is prefixed with *context*. Rate-limit and authentication
    failures keep their type so callers can still inspect ``retryable``.
    """
    message = f"{context}: {get_error_message(error)}"
    if isinstance(error, RateLimitError):
        return RateLimitError(
            message, retry_after=error.retry_after, raw=error.raw, cause=error
        )
    if isinstance(error, AuthenticationError):
        return AuthenticationError(message, raw=error.raw, cause=error)
    if isinstance(error, ApiError):
        return ApiError(
            message,
            status_code=error.status_code,
            retryable=error.retryable,
            raw=error.raw,
            cause=error,
        )
    return ApiError(
        message,
        retryable=getattr(error, "retryable", False),
        cause=error,
    )


def get_error_message(error: BaseException) -> str:
    """Best-effort human-readable message for any exception."""
    if isinstance(error, BridgeError):
        return error.message or "Unknown error"
    text = str(error)
    return text or type(error).__name__ or "Unknown error"


def issues_from_validation_error(exc: PydanticValidationError) -> list[Issue]:
    """Flatten a pydantic ValidationError into ``{path, message}`` issues."""
    return [
        Issue(
            path=".".join(str(part) for part in error["loc"]),
            message=error["msg"],
        )
        for error in exc.errors()
    ]
