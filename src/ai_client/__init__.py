"""Resilient Gemini text and multimodal generation client."""

import importlib.metadata
import logging

from ai_client.config import ClientSettings, load_settings
from ai_client.exceptions import (
    AIClientError,
    APIError,
    ConfigurationError,
    ErrorKind,
    PromptError,
    ResponseRejectedError,
    RetriesExhaustedError,
    UploadError,
    UploadTimeoutError,
    ValidationError,
)
from ai_client.gemini_client import GeminiClient, GenerativeModel
from ai_client.prompts import PromptBuilder, PromptTemplates
from ai_client.runner import Runner
from ai_client.telemetry import SimpleReporter, TelemetryContext, TelemetryReporter
from ai_client.types import (
    FileRefPart,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    InlineDataPart,
    RetryPolicy,
    SafetySetting,
    TextPart,
)

# Version handling
try:
    __version__ = importlib.metadata.version("ai-client")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Library logging stays silent unless the application configures handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Client
    "GeminiClient",
    "GenerativeModel",
    "Runner",
    # Configuration
    "ClientSettings",
    "load_settings",
    # Prompts
    "PromptBuilder",
    "PromptTemplates",
    # Types
    "TextPart",
    "InlineDataPart",
    "FileRefPart",
    "GenerationRequest",
    "GenerationOptions",
    "GenerationResult",
    "RetryPolicy",
    "SafetySetting",
    # Telemetry (extension points)
    "TelemetryContext",
    "TelemetryReporter",
    "SimpleReporter",
    # Exceptions
    "AIClientError",
    "ErrorKind",
    "ConfigurationError",
    "ValidationError",
    "PromptError",
    "ResponseRejectedError",
    "APIError",
    "RetriesExhaustedError",
    "UploadError",
    "UploadTimeoutError",
]
