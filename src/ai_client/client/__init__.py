"""Building blocks of the resilient generation client.

The facade is ``ai_client.GeminiClient``; these components are exposed for
custom transports and tests.
"""

from .error_classifier import (
    ClassifiedError,
    FailureKind,
    RetryDecision,
    classify,
    describe,
    should_retry,
)
from .offloader import LargePayloadOffloader
from .response_extractor import extract_text
from .retry import execute_with_retry
from .transport import GenerationTransport, GoogleGenAITransport

__all__ = [  # noqa: RUF022
    # Classification
    "ClassifiedError",
    "FailureKind",
    "RetryDecision",
    "classify",
    "describe",
    "should_retry",
    # Execution
    "execute_with_retry",
    "extract_text",
    "LargePayloadOffloader",
    # Transport
    "GenerationTransport",
    "GoogleGenAITransport",
]
