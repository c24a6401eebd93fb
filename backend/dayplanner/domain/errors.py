"""Error taxonomy for schedule generation.

A single exception type carries a tagged :class:`ErrorKind` plus a structured
payload (optional numeric code and context) so callers branch on ``kind``
rather than on exception subclasses.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    TIME_RANGE = "time_range"
    CAPACITY = "capacity"
    NETWORK = "network"
    TIMEOUT = "timeout"
    API = "api"
    PARSE = "parse"


# Kinds whose raw message is written for end users.
USER_FACING_KINDS = {ErrorKind.VALIDATION, ErrorKind.TIME_RANGE, ErrorKind.CAPACITY}

API_STATUS_MESSAGES = {
    401: "Authentication with the scheduling service failed.",
    429: "Too many requests. Please try again in a moment.",
    500: "The scheduling service ran into a problem.",
}

DEFAULT_USER_MESSAGES = {
    ErrorKind.NETWORK: "Please check your internet connection.",
    ErrorKind.TIMEOUT: "The request timed out. Please try again.",
    ErrorKind.API: "The scheduling service is temporarily unavailable.",
    ErrorKind.PARSE: "Something went wrong while reading the generated schedule.",
}


class SchedulerError(Exception):
    """Domain failure tagged with an :class:`ErrorKind`."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.code = code
        self.context: Dict[str, Any] = dict(context or {})

    @property
    def retryable(self) -> bool:
        return self.kind in {ErrorKind.NETWORK, ErrorKind.TIMEOUT, ErrorKind.API}

    @property
    def user_message(self) -> str:
        if self.kind in USER_FACING_KINDS:
            return self.message
        if self.kind is ErrorKind.API and self.code in API_STATUS_MESSAGES:
            return API_STATUS_MESSAGES[self.code]
        return DEFAULT_USER_MESSAGES[self.kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.user_message,
            "code": self.code,
            "context": self.context,
        }

    def __repr__(self) -> str:
        return f"SchedulerError(kind={self.kind.value!r}, message={self.message!r}, code={self.code!r})"


def validation_error(message: str, **context: Any) -> SchedulerError:
    return SchedulerError(ErrorKind.VALIDATION, message, context=context)


def time_range_error(message: str, **context: Any) -> SchedulerError:
    return SchedulerError(ErrorKind.TIME_RANGE, message, context=context)


def capacity_error(message: str, **context: Any) -> SchedulerError:
    return SchedulerError(ErrorKind.CAPACITY, message, context=context)


def parse_error(message: str = "Failed to parse the completion response.") -> SchedulerError:
    return SchedulerError(ErrorKind.PARSE, message)


def as_scheduler_error(exc: BaseException) -> SchedulerError:
    """Wrap an unexpected exception the way unknown transport failures are reported."""
    if isinstance(exc, SchedulerError):
        return exc
    return SchedulerError(ErrorKind.NETWORK, f"Unexpected error: {exc}", context={"type": type(exc).__name__})
