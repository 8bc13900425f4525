"""Retry classification for errors raised around a generation call.

The classifier is a pure function of the exception: the same error always
yields the same verdict. Unknown failure shapes are never retried.
"""

from __future__ import annotations

import asyncio
import dataclasses
from enum import Enum

from google.genai import errors as genai_errors
import httpx

from ..exceptions import ResponseRejectedError  # noqa: TID252


class RetryDecision(Enum):
    RETRY = "retry"
    NO_RETRY = "no_retry"


class FailureKind(str, Enum):
    """Tag of a ``ClassifiedError``."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"
    RESPONSE_REJECTED = "response_rejected"
    CANCELLED = "cancelled"


@dataclasses.dataclass(frozen=True, slots=True)
class ClassifiedError:
    """Tagged view of a failure: kind plus the transport code or reason."""

    kind: FailureKind
    code: str | None = None
    reason: str | None = None

    @property
    def decision(self) -> RetryDecision:
        if self.kind is FailureKind.TRANSIENT:
            return RetryDecision.RETRY
        return RetryDecision.NO_RETRY


# gRPC-style status names as reported by the Gemini API error payload
TRANSIENT_STATUSES = frozenset(
    {"UNAVAILABLE", "RESOURCE_EXHAUSTED", "INTERNAL", "DEADLINE_EXCEEDED"}
)
PERMANENT_STATUSES = frozenset(
    {"INVALID_ARGUMENT", "UNAUTHENTICATED", "NOT_FOUND", "PERMISSION_DENIED"}
)

# HTTP equivalents, used when the payload carries no status name
HTTP_STATUS_NAMES = {
    400: "INVALID_ARGUMENT",
    401: "UNAUTHENTICATED",
    403: "PERMISSION_DENIED",
    404: "NOT_FOUND",
    429: "RESOURCE_EXHAUSTED",
    500: "INTERNAL",
    503: "UNAVAILABLE",
    504: "DEADLINE_EXCEEDED",
}

_UNKNOWN = ClassifiedError(FailureKind.PERMANENT, code="UNKNOWN")
_KNOWN_STATUSES = TRANSIENT_STATUSES | PERMANENT_STATUSES


def _status_name(err: genai_errors.APIError) -> str | None:
    """Known status name of ``err``, else the name for its HTTP code.

    Non-JSON error bodies (proxy or front-end pages) leave the HTTP reason
    phrase in ``status``, so only recognised names are taken from it.
    """
    status = getattr(err, "status", None)
    if isinstance(status, str) and status.upper() in _KNOWN_STATUSES:
        return status.upper()
    code = getattr(err, "code", None)
    if isinstance(code, int):
        return HTTP_STATUS_NAMES.get(code)
    return None


def describe(err: BaseException) -> ClassifiedError:
    """Map an exception to its ``ClassifiedError``."""
    if isinstance(err, ResponseRejectedError):
        return ClassifiedError(FailureKind.RESPONSE_REJECTED, reason=err.reason)

    # Caller gave up (cancellation or its own deadline); never retry past it.
    # Subclasses of TimeoutError are socket timeouts from an HTTP backend
    # such as aiohttp and are handled below.
    if isinstance(err, asyncio.CancelledError) or type(err) is TimeoutError:
        return ClassifiedError(FailureKind.CANCELLED, code=type(err).__name__)

    if isinstance(err, genai_errors.APIError):
        status = _status_name(err)
        if status in TRANSIENT_STATUSES:
            return ClassifiedError(FailureKind.TRANSIENT, code=status)
        if status in PERMANENT_STATUSES:
            return ClassifiedError(FailureKind.PERMANENT, code=status)
        return ClassifiedError(
            FailureKind.PERMANENT, code=status or str(getattr(err, "code", ""))
        )

    # Transport-level deadline or dropped connection inside the SDK
    if isinstance(err, httpx.TimeoutException | TimeoutError):
        return ClassifiedError(FailureKind.TRANSIENT, code="DEADLINE_EXCEEDED")
    if isinstance(err, httpx.NetworkError):
        return ClassifiedError(FailureKind.TRANSIENT, code="UNAVAILABLE")

    return _UNKNOWN


def classify(err: BaseException) -> RetryDecision:
    """Return whether another attempt could fix ``err``."""
    return describe(err).decision


def should_retry(err: BaseException) -> bool:
    """Retry predicate for ``execute_with_retry``."""
    return classify(err) is RetryDecision.RETRY
