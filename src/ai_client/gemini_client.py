"""Resilient Gemini client for text and multimodal generation"""  # noqa: D415

import asyncio
from collections.abc import Awaitable, Callable, Sequence
import dataclasses
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .client.error_classifier import RetryDecision, describe, should_retry
from .client.offloader import LargePayloadOffloader
from .client.response_extractor import extract_text
from .client.retry import execute_with_retry
from .client.transport import GenerationTransport, GoogleGenAITransport
from .config import ClientSettings, load_settings
from .constants import (
    API_KEY_ENV_VARS,
    DEFAULT_TEMPERATURE,
    FILE_OFFLOAD_THRESHOLD,
    FILE_POLL_INTERVAL,
    FILE_PROCESSING_TIMEOUT,
)
from .exceptions import (
    AIClientError,
    APIError,
    ConfigurationError,
    ResponseRejectedError,
    ValidationError,
)
from .telemetry import TelemetryContext, TelemetryContextProtocol
from .types import (
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    Part,
    RetryPolicy,
    TextPart,
    temperature_in_range,
)

log = logging.getLogger(__name__)


@runtime_checkable
class GenerativeModel(Protocol):
    """What the runner and CLI need from a generation backend."""

    async def generate_text(self, prompt: str, model: str) -> GenerationResult: ...

    async def generate_from_parts(
        self,
        model: str,
        parts: Sequence[Part],
        options: GenerationOptions | None = None,
    ) -> GenerationResult: ...


def build_generate_config(
    temperature: float, options: GenerationOptions | None = None
) -> dict[str, Any]:
    """Build the neutral request config handed to the transport.

    Text-only calls pass no options and carry the temperature alone. Optional
    fields are included only when set; an empty aspect ratio is omitted
    because not every model accepts an image config.
    """
    if options is None:
        return {"temperature": temperature}

    config: dict[str, Any] = {
        "temperature": (
            options.temperature if options.temperature is not None else temperature
        ),
        "top_p": options.top_p,
        "candidate_count": options.candidate_count,
    }
    if options.seed is not None:
        config["seed"] = options.seed
    if options.safety_settings:
        config["safety_settings"] = options.safety_settings
    if options.system_prompt:
        config["system_instruction"] = options.system_prompt
    if options.aspect_ratio:
        config["aspect_ratio"] = options.aspect_ratio
    return config


def _retry_generation(err: BaseException) -> bool:
    """Retry predicate for generation attempts.

    Content rejections are final. Wrapped transport errors carry their
    classification; anything else goes through the classifier.
    """
    if isinstance(err, ResponseRejectedError):
        return False
    if isinstance(err, APIError) and err.classification is not None:
        return err.classification.decision is RetryDecision.RETRY
    return should_retry(err)


class GeminiClient:
    """Generation client with retries, response validation and large-payload offload.

    Safe to share across concurrent calls: configuration is read-only after
    construction and all per-call state (attempt counters, uploaded files)
    lives inside the call.

    Examples:
        client = GeminiClient(api_key="...")
        result = await client.generate_text("Hello", "gemini-2.5-flash")
        print(result.text)
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        temperature: float | None = None,
        retry_policy: RetryPolicy | None = None,
        request_timeout: float | None = None,
        transport: GenerationTransport | None = None,
        offload_threshold: int = FILE_OFFLOAD_THRESHOLD,
        poll_interval: float = FILE_POLL_INTERVAL,
        poll_timeout: float = FILE_PROCESSING_TIMEOUT,
        max_upload_concurrency: int | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        telemetry_context: TelemetryContextProtocol | None = None,
    ):
        """Validate settings and wire the collaborators.

        Args:
            api_key: Gemini API key. Required even when ``transport`` is given.
            temperature: Sampling temperature in [0.0, 1.0]; defaults to 0.7.
            retry_policy: Backoff parameters shared by every call.
            request_timeout: Deadline in seconds for a whole call (offload,
                retries and backoff included). ``None`` means no deadline.
            transport: Provider operations; defaults to the google-genai SDK.
            offload_threshold: Inline parts larger than this many bytes are
                uploaded to the Files API first.
            poll_interval: Seconds between file status checks.
            poll_timeout: Seconds to wait for an uploaded file to become ACTIVE.
            max_upload_concurrency: Optional bound on parallel uploads.
            sleep: Awaitable used for backoff and polling waits.
            telemetry_context: Telemetry sink; no-op by default.

        Raises:
            ConfigurationError: Missing API key or temperature out of range.
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError(
                "API key is required. Set "
                + " or ".join(API_KEY_ENV_VARS)
                + " environment variable, or pass api_key explicitly."
            )
        if temperature is None:
            temperature = DEFAULT_TEMPERATURE
        if isinstance(temperature, bool) or not isinstance(temperature, int | float):
            raise ConfigurationError(f"Temperature must be a number, got {temperature!r}")
        if not temperature_in_range(temperature):
            raise ConfigurationError(
                f"Temperature must be between 0.0 and 1.0, got {temperature}"
            )
        if request_timeout is not None and request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout must be positive, got {request_timeout}"
            )

        self.temperature = float(temperature)
        self.retry_policy = retry_policy or RetryPolicy()
        self.request_timeout = request_timeout
        self.tele = telemetry_context or TelemetryContext()
        self._sleep = sleep

        self.transport = transport or GoogleGenAITransport(api_key)
        self.offloader = LargePayloadOffloader(
            self.transport,
            threshold=offload_threshold,
            poll_interval=poll_interval,
            poll_timeout=poll_timeout,
            max_concurrency=max_upload_concurrency,
            sleep=sleep,
            telemetry=self.tele,
        )

        log.debug(
            "GeminiClient initialized: temperature=%.2f, max_retries=%d",
            self.temperature,
            self.retry_policy.max_retries,
        )

    @classmethod
    def from_settings(
        cls, settings: ClientSettings, **overrides: Any
    ) -> "GeminiClient":
        """Build a client from resolved settings.

        The settings timeout bounds each HTTP request made by the SDK; callers
        wanting an overall deadline pass ``request_timeout``.
        """
        if "transport" not in overrides and settings.api_key:
            overrides["transport"] = GoogleGenAITransport(
                settings.api_key, request_timeout=settings.timeout
            )
        overrides.setdefault("temperature", settings.temperature)
        overrides.setdefault("retry_policy", settings.retry_policy())
        return cls(settings.api_key, **overrides)

    @classmethod
    def from_env(
        cls, env_file: str | Path | None = None, **overrides: Any
    ) -> "GeminiClient":
        """Build a client from ``GEMINI_*`` environment variables."""
        return cls.from_settings(load_settings(env_file), **overrides)

    # --- Public API ---

    async def generate_text(self, prompt: str, model: str) -> GenerationResult:
        """Generate text from a single prompt.

        Raises:
            ValidationError: Empty prompt or model; no request is sent.
            ResponseRejectedError: Blocked, empty or missing content.
            APIError: A non-retryable transport failure.
            RetriesExhaustedError: Every attempt failed transiently.
            TimeoutError: ``request_timeout`` elapsed.
        """
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")
        self._require_model(model)

        request = GenerationRequest(prompt=prompt)
        call = _Call("generate_text", model)
        config = build_generate_config(self.temperature)
        return await self._run(
            call,
            lambda: self._generate(
                call,
                (TextPart(prompt),),
                config,
                allow_empty=request.is_multimodal,
            ),
        )

    async def generate_from_parts(
        self,
        model: str,
        parts: Sequence[Part],
        options: GenerationOptions | None = None,
    ) -> GenerationResult:
        """Generate from an ordered list of text, inline and file parts.

        Oversized inline parts are uploaded before the request and deleted
        after it, whatever the outcome. An empty text result is valid here:
        image output is available through ``GenerationResult.inline_images``.

        Raises:
            ValidationError: Empty or malformed parts, or empty model.
            UploadError: Offloading a large part failed; no request is sent.
            UploadTimeoutError: An uploaded file never became ACTIVE.
            ResponseRejectedError: Blocked or empty response.
            APIError: A non-retryable transport failure.
            RetriesExhaustedError: Every attempt failed transiently.
            TimeoutError: ``request_timeout`` elapsed.
        """
        self._require_model(model)
        try:
            request = GenerationRequest(parts=tuple(parts or ()))
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid parts: {e}") from e

        call = _Call("generate_from_parts", model)
        config = build_generate_config(self.temperature, options or GenerationOptions())

        async def offload_and_generate() -> tuple[Any, str]:
            async with self.offloader.offload(request.parts) as effective:
                return await self._generate(
                    call, effective, config, allow_empty=request.is_multimodal
                )

        return await self._run(call, offload_and_generate)

    # --- Internals ---

    @staticmethod
    def _require_model(model: str) -> None:
        if not isinstance(model, str) or not model.strip():
            raise ValidationError("Model name cannot be empty")

    async def _run(
        self, call: "_Call", body: Callable[[], Awaitable[tuple[Any, str]]]
    ) -> GenerationResult:
        """Apply the call deadline, telemetry scope and completion event."""
        outcome = "error"
        with self.tele(f"client.{call.operation}", model=call.model):
            try:
                async with asyncio.timeout(self.request_timeout):
                    response, text = await body()
                outcome = "ok"
            except TimeoutError:
                outcome = "timeout"
                raise
            finally:
                log.info(
                    "%s on %s finished (%s) after %d attempt(s)",
                    call.operation,
                    call.model,
                    outcome,
                    call.attempts,
                    extra={
                        "operation": call.operation,
                        "model": call.model,
                        "attempts": call.attempts,
                    },
                )
        return GenerationResult(
            text=text, raw_response=response, model=call.model, attempts=call.attempts
        )

    async def _generate(
        self,
        call: "_Call",
        contents: Sequence[Part],
        config: dict[str, Any],
        *,
        allow_empty: bool,
    ) -> tuple[Any, str]:
        async def attempt() -> tuple[Any, str]:
            call.attempts += 1
            try:
                response = await self.transport.generate_content(
                    call.model, contents, config
                )
            except AIClientError:
                raise
            except Exception as e:
                raise APIError(
                    f"{call.operation} failed: {e}", classification=describe(e)
                ) from e
            return response, extract_text(response, allow_empty=allow_empty)

        return await execute_with_retry(
            self.retry_policy,
            call.operation,
            attempt,
            _retry_generation,
            sleep=self._sleep,
            telemetry=self.tele,
        )


@dataclasses.dataclass(slots=True)
class _Call:
    """Per-call bookkeeping for logging and the result."""

    operation: str
    model: str
    attempts: int = 0
