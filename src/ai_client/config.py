"""Configuration schema and loading using Pydantic settings.

Values come from keyword overrides, then ``GEMINI_*`` environment variables
(the API key also from ``GOOGLE_API_KEY``), then an optional ``.env`` file,
then defaults. The result is a plain, read-only settings object; nothing in
the library reads the environment after this point.
"""

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ai_client.constants import (
    DEFAULT_MODEL,
    DEFAULT_REQUEST_TIMEOUT,
    MAX_RETRIES,
    MAX_TEMPERATURE,
    MIN_TEMPERATURE,
    RETRY_INITIAL_DELAY,
    RETRY_MAX_DELAY,
)
from ai_client.exceptions import ConfigurationError
from ai_client.types import RetryPolicy


class ClientSettings(BaseSettings):
    """Settings consumed by ``GeminiClient.from_settings`` and the CLI."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=None,  # Only used when explicitly requested
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY"),
        description="Gemini API key",
    )

    model: str = Field(
        default=DEFAULT_MODEL,
        description="Gemini model identifier",
        min_length=1,
    )

    temperature: float | None = Field(
        default=None,
        ge=MIN_TEMPERATURE,
        le=MAX_TEMPERATURE,
        description="Sampling temperature; the client default applies when unset",
    )

    max_retries: int = Field(default=MAX_RETRIES, ge=0)
    initial_delay: float = Field(default=RETRY_INITIAL_DELAY, ge=0)
    max_delay: float = Field(default=RETRY_MAX_DELAY, ge=0)

    timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0,
        description="Per-request deadline in seconds",
    )

    @model_validator(mode="after")
    def validate_delays(self) -> "ClientSettings":
        """Ensure the backoff ceiling is not below the initial delay."""
        if self.max_delay < self.initial_delay:
            raise ValueError(
                f"max_delay ({self.max_delay}) must be >= initial_delay "
                f"({self.initial_delay})"
            )
        return self

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            initial_interval=self.initial_delay,
            max_interval=self.max_delay,
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain dictionary with the API key redacted, for debugging output."""
        data = self.model_dump()
        if data.get("api_key"):
            data["api_key"] = "***"
        return data


def load_settings(env_file: str | Path | None = None, **overrides: Any) -> ClientSettings:
    """Resolve settings from overrides, environment and an optional .env file.

    Overrides whose value is ``None`` are ignored so CLI flags that were not
    given fall through to the environment.

    Raises:
        ConfigurationError: A value failed validation.
    """
    explicit = {k: v for k, v in overrides.items() if v is not None}
    try:
        return ClientSettings(_env_file=env_file, **explicit)  # type: ignore[call-arg]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
