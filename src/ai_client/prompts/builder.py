"""Render prompt templates with Jinja2"""  # noqa: D415

import logging

import jinja2

from ai_client.exceptions import PromptError

from .templates import PromptTemplates

log = logging.getLogger(__name__)


def create_environment() -> jinja2.Environment:
    """Jinja2 environment for plain-text prompts."""
    return jinja2.Environment(  # noqa: S701
        undefined=jinja2.StrictUndefined,  # Fail on undefined variables
        autoescape=False,
        keep_trailing_newline=True,
    )


class PromptBuilder:
    """Builds the final prompt for a mode by rendering ``{{ content }}``.

    Templates are compiled on first use and cached per mode.
    """

    def __init__(
        self,
        templates: PromptTemplates | None = None,
        environment: jinja2.Environment | None = None,
    ):
        self.templates = templates or PromptTemplates.default()
        self._env = environment or create_environment()
        self._compiled: dict[str, jinja2.Template] = {}

    @property
    def modes(self) -> tuple[str, ...]:
        return self.templates.modes

    def build(self, content: str, mode: str) -> str:
        """Render the template for ``mode`` with ``content``.

        Raises:
            PromptError: Unknown mode, invalid template syntax or a render error.
        """
        template = self._template_for(mode)
        try:
            prompt = template.render(content=content)
        except jinja2.TemplateError as e:
            raise PromptError(f"Failed to render '{mode}' template: {e}") from e
        log.debug("Built prompt for mode '%s' (%d chars)", mode, len(prompt))
        return prompt

    def _template_for(self, mode: str) -> jinja2.Template:
        if mode in self._compiled:
            return self._compiled[mode]
        source = self.templates.source_for(mode)
        try:
            template = self._env.from_string(source)
        except jinja2.TemplateSyntaxError as e:
            raise PromptError(
                f"Invalid '{mode}' template (line {e.lineno}): {e.message}"
            ) from e
        self._compiled[mode] = template
        return template
