"""Prompt construction plus one generation call under a deadline"""  # noqa: D415

import asyncio
import dataclasses
import logging

from ai_client.constants import DEFAULT_MODEL, DEFAULT_REQUEST_TIMEOUT
from ai_client.exceptions import ValidationError
from ai_client.gemini_client import GenerativeModel
from ai_client.prompts import PromptBuilder
from ai_client.types import GenerationResult

log = logging.getLogger(__name__)


@dataclasses.dataclass
class Runner:
    """Turns user input into a prompt and asks the model for a response.

    With a mode, the input is rendered through that prompt template; without
    one (the ``generic`` path) it is sent unchanged. ``timeout`` bounds the
    whole call, retries included; ``None`` disables it.
    """

    client: GenerativeModel
    prompt_builder: PromptBuilder = dataclasses.field(default_factory=PromptBuilder)
    model: str = DEFAULT_MODEL
    timeout: float | None = DEFAULT_REQUEST_TIMEOUT

    def build_prompt(self, text: str, mode: str | None = None) -> str:
        """Final prompt for ``text``; raises ``PromptError`` for an unknown mode."""
        if not mode:
            log.debug("Building prompt without template (generic)")
            return text
        log.debug("Building prompt from template (mode: %s)", mode)
        return self.prompt_builder.build(text, mode)

    async def run(self, content: str | bytes, mode: str | None = None) -> GenerationResult:
        """Build the prompt and generate a response.

        Raises:
            ValidationError: ``content`` is bytes that are not valid UTF-8.
            PromptError: Unknown mode or template failure; nothing is sent.
            TimeoutError: The call did not finish within ``timeout``.
            AIClientError: Any failure reported by the client.
        """
        text = _decode(content)
        prompt = self.build_prompt(text, mode)

        log.info(
            "Sending generation request (model: %s, mode: %s, timeout: %ss)",
            self.model,
            mode or "generic",
            self.timeout,
        )
        async with asyncio.timeout(self.timeout):
            return await self.client.generate_text(prompt, self.model)


def _decode(content: str | bytes) -> str:
    if not isinstance(content, bytes):
        return content
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ValidationError(f"Input is not valid UTF-8 text: {e}") from e
