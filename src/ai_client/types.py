"""Core data types shared by the client, the offloader and the runner.

These are library-owned, immutable values. Provider SDK types never appear
here; the transport converts them at the edge.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
import typing

from ai_client.constants import (
    DEFAULT_CANDIDATE_COUNT,
    DEFAULT_TOP_P,
    MAX_RETRIES,
    MAX_TEMPERATURE,
    MIN_TEMPERATURE,
    RETRY_INITIAL_DELAY,
    RETRY_MAX_DELAY,
)
from ai_client.exceptions import ValidationError

# --- Minimal guard helpers (clarity > boilerplate) ---


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


def _is_tuple_of(value: object, typ: type | tuple[type, ...]) -> bool:
    return isinstance(value, tuple) and all(isinstance(v, typ) for v in value)


def temperature_in_range(value: float) -> bool:
    """Return True when ``value`` is an accepted sampling temperature."""
    return MIN_TEMPERATURE <= value <= MAX_TEMPERATURE


# --- Parts ---


@dataclasses.dataclass(frozen=True, slots=True)
class TextPart:
    """A text segment of a request."""

    text: str

    def __post_init__(self) -> None:
        """Validate TextPart invariants."""
        _require(
            condition=isinstance(self.text, str),
            message="text must be a str",
            exc=TypeError,
        )


@dataclasses.dataclass(frozen=True, slots=True)
class InlineDataPart:
    """Binary content sent inline with the request.

    Parts larger than the offload threshold are uploaded to the Files API and
    replaced by a ``FileRefPart`` before the generation call.
    """

    data: bytes
    mime_type: str

    def __post_init__(self) -> None:
        """Validate InlineDataPart invariants."""
        _require(
            condition=isinstance(self.data, bytes | bytearray),
            message="data must be bytes-like",
            exc=TypeError,
        )
        _require(
            condition=isinstance(self.mime_type, str) and self.mime_type.strip() != "",
            message="mime_type must be a non-empty str",
            exc=TypeError,
        )
        if isinstance(self.data, bytearray):
            object.__setattr__(self, "data", bytes(self.data))

    @property
    def size_bytes(self) -> int:
        return len(self.data)


@dataclasses.dataclass(frozen=True, slots=True)
class FileRefPart:
    """Reference to content already stored by the provider."""

    uri: str
    mime_type: str | None = None

    def __post_init__(self) -> None:
        """Validate FileRefPart invariants."""
        _require(
            condition=isinstance(self.uri, str) and self.uri != "",
            message="uri must be a non-empty str",
            exc=TypeError,
        )
        _require(
            condition=self.mime_type is None or isinstance(self.mime_type, str),
            message="mime_type must be a str or None",
            exc=TypeError,
        )


Part: typing.TypeAlias = TextPart | InlineDataPart | FileRefPart

PART_TYPES: tuple[type, ...] = (TextPart, InlineDataPart, FileRefPart)


@dataclasses.dataclass(frozen=True, slots=True)
class GenerationRequest:
    """Either a single text prompt or an ordered sequence of parts.

    Immutable once constructed; any list of parts is frozen into a tuple.
    """

    prompt: str | None = None
    parts: tuple[Part, ...] = ()

    def __post_init__(self) -> None:
        """Validate that exactly one of prompt/parts is provided."""
        if not isinstance(self.parts, tuple):
            object.__setattr__(self, "parts", tuple(self.parts))
        _require(
            condition=(self.prompt is None) != (len(self.parts) == 0),
            message="exactly one of prompt or parts must be provided",
        )
        _require(
            condition=_is_tuple_of(self.parts, PART_TYPES),
            message="must contain only TextPart, InlineDataPart or FileRefPart",
            field_name="parts",
            exc=TypeError,
        )

    @property
    def is_multimodal(self) -> bool:
        return self.prompt is None


# --- Options ---


@dataclasses.dataclass(frozen=True, slots=True)
class SafetySetting:
    """A content-filter threshold for one harm category.

    Values are the provider enum names, e.g.
    ``SafetySetting("HARM_CATEGORY_HARASSMENT", "BLOCK_ONLY_HIGH")``.
    """

    category: str
    threshold: str


@dataclasses.dataclass(frozen=True, slots=True)
class GenerationOptions:
    """Per-call model parameters for multimodal generation."""

    temperature: float | None = None
    top_p: float = DEFAULT_TOP_P
    candidate_count: int = DEFAULT_CANDIDATE_COUNT
    seed: int | None = None
    aspect_ratio: str = ""
    safety_settings: tuple[SafetySetting, ...] = ()
    system_prompt: str = ""

    def __post_init__(self) -> None:
        """Validate option ranges."""
        if self.temperature is not None:
            _require(
                condition=temperature_in_range(self.temperature),
                message=f"must be between 0.0 and 1.0, got {self.temperature}",
                field_name="temperature",
                exc=ValidationError,
            )
        _require(
            condition=0.0 <= self.top_p <= 1.0,
            message=f"must be between 0.0 and 1.0, got {self.top_p}",
            field_name="top_p",
            exc=ValidationError,
        )
        _require(
            condition=isinstance(self.candidate_count, int)
            and self.candidate_count >= 1,
            message="must be an int >= 1",
            field_name="candidate_count",
            exc=ValidationError,
        )
        if not isinstance(self.safety_settings, tuple):
            object.__setattr__(self, "safety_settings", tuple(self.safety_settings))


# --- Retry ---


@dataclasses.dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded exponential backoff parameters.

    Constructed once per client and shared read-only across calls.
    """

    max_retries: int = MAX_RETRIES
    initial_interval: float = RETRY_INITIAL_DELAY
    max_interval: float = RETRY_MAX_DELAY

    def __post_init__(self) -> None:
        """Validate policy bounds."""
        _require(
            condition=isinstance(self.max_retries, int) and self.max_retries >= 0,
            message="must be an int >= 0",
            field_name="max_retries",
        )
        _require(
            condition=self.initial_interval >= 0,
            message="must be >= 0",
            field_name="initial_interval",
        )
        _require(
            condition=self.max_interval >= self.initial_interval,
            message="must be >= initial_interval",
            field_name="max_interval",
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, retry_index: int) -> float:
        """Backoff before retry number ``retry_index`` (0-based), capped."""
        return min(self.initial_interval * (2**retry_index), self.max_interval)


# --- Uploaded blobs ---


class BlobState(str, Enum):
    """Lifecycle of a file offloaded to the provider.

    UPLOADING -> PROCESSING -> ACTIVE | FAILED; ACTIVE is used then DELETED.
    """

    UPLOADING = "uploading"
    PROCESSING = "processing"
    ACTIVE = "active"
    FAILED = "failed"
    DELETED = "deleted"


@dataclasses.dataclass(frozen=True, slots=True)
class UploadedBlob:
    """Provider-side handle for an uploaded file."""

    name: str
    uri: str = ""
    state: BlobState = BlobState.UPLOADING
    mime_type: str | None = None
    display_name: str | None = None

    def with_state(self, state: BlobState) -> UploadedBlob:
        return dataclasses.replace(self, state=state)


# --- Results ---


@dataclasses.dataclass(frozen=True, slots=True)
class GenerationResult:
    """Normalized result of one generation call.

    ``raw_response`` is the untouched provider response, kept for advanced
    extraction such as image output.
    """

    text: str
    raw_response: typing.Any = None
    model: str | None = None
    attempts: int = 1

    def inline_images(self) -> list[InlineDataPart]:
        """Return inline binary parts of the first candidate, if any."""
        candidates = getattr(self.raw_response, "candidates", None) or []
        if not candidates:
            return []
        content = getattr(candidates[0], "content", None)
        images: list[InlineDataPart] = []
        for part in getattr(content, "parts", None) or []:
            blob = getattr(part, "inline_data", None)
            data = getattr(blob, "data", None)
            if data:
                images.append(
                    InlineDataPart(
                        data=data,
                        mime_type=getattr(blob, "mime_type", None)
                        or "application/octet-stream",
                    )
                )
        return images
