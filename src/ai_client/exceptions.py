"""Exceptions raised by the ai-client package.

Every library error derives from ``AIClientError`` and carries an
``ErrorKind`` so callers (the CLI in particular) can branch on the category
of failure without parsing messages.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ai_client.client.error_classifier import ClassifiedError


class ErrorKind(str, Enum):
    """Closed set of failure categories surfaced to callers."""

    CONFIGURATION = "configuration"
    INVALID_INPUT = "invalid_input"
    CONTENT_BLOCKED = "content_blocked"
    TRANSPORT = "transport"
    RETRIES_EXHAUSTED = "retries_exhausted"
    UPLOAD = "upload"


class AIClientError(Exception):
    """Base exception for ai-client errors"""  # noqa: D415

    kind: ErrorKind = ErrorKind.TRANSPORT


class ConfigurationError(AIClientError):
    """Raised when the client cannot be built from the given settings"""  # noqa: D415

    kind = ErrorKind.CONFIGURATION


class ValidationError(AIClientError):
    """Raised when input validation fails before any network call"""  # noqa: D415

    kind = ErrorKind.INVALID_INPUT


class PromptError(ValidationError):
    """Raised when a prompt template is unknown, empty or fails to render"""  # noqa: D415


class ResponseRejectedError(AIClientError):
    """Raised when a delivered response carries no usable content.

    Covers safety/recitation blocks, empty candidate lists and empty content
    in text-only calls. Never retried.
    """

    kind = ErrorKind.CONTENT_BLOCKED

    def __init__(self, reason: str):
        super().__init__(f"Response rejected: {reason}")
        self.reason = reason


class APIError(AIClientError):
    """Raised when the provider call fails with a non-retried transport error"""  # noqa: D415

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        classification: ClassifiedError | None = None,
    ):
        super().__init__(message)
        self.classification = classification


class RetriesExhaustedError(AIClientError):
    """Raised when every attempt of a retried operation failed transiently"""  # noqa: D415

    kind = ErrorKind.RETRIES_EXHAUSTED

    def __init__(self, label: str, attempts: int, last_error: BaseException):
        super().__init__(
            f"{label}: retries exhausted after {attempts} attempts: {last_error}"
        )
        self.label = label
        self.attempts = attempts
        self.last_error = last_error


class UploadError(AIClientError):
    """Raised when offloading a large part to the Files API fails"""  # noqa: D415

    kind = ErrorKind.UPLOAD


class UploadTimeoutError(UploadError):
    """Raised when an uploaded file does not become ACTIVE in time"""  # noqa: D415
