"""Prompt template sets.

A ``PromptTemplates`` value maps a mode name to Jinja2 template source. It is
built once (usually ``PromptTemplates.default()``) and handed to the prompt
builder; there is no process-wide registry to mutate.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
import dataclasses
from types import MappingProxyType

from ai_client.exceptions import PromptError

SOLO_TEMPLATE = """\
You are a scriptwriter. Rewrite the input text below as a monologue script
for a single narrator. Keep every fact from the input, use a natural spoken
register, and split the script into short paragraphs suitable for reading
aloud. Output only the script.

[Input text]
{{ content }}
"""

DIALOGUE_TEMPLATE = """\
You are a scriptwriter. Rewrite the input text below as a dialogue script
between two speakers, "Host" and "Guest". The host asks questions and the
guest explains. Keep every fact from the input and format each line as
"Speaker: line". Output only the script.

[Input text]
{{ content }}
"""

DEFAULT_TEMPLATES: Mapping[str, str] = MappingProxyType(
    {"solo": SOLO_TEMPLATE, "dialogue": DIALOGUE_TEMPLATE}
)


@dataclasses.dataclass(frozen=True, slots=True)
class PromptTemplates:
    """Immutable mapping of mode name to template source."""

    templates: Mapping[str, str] = dataclasses.field(default_factory=lambda: DEFAULT_TEMPLATES)

    def __post_init__(self) -> None:
        """Validate names and sources, then freeze the mapping."""
        for name, source in self.templates.items():
            if not isinstance(name, str) or not name.strip():
                raise PromptError("Template mode name cannot be empty")
            if not isinstance(source, str) or not source.strip():
                raise PromptError(f"Template for mode '{name}' is empty")
        object.__setattr__(self, "templates", MappingProxyType(dict(self.templates)))

    @classmethod
    def default(cls) -> PromptTemplates:
        return cls(DEFAULT_TEMPLATES)

    def with_template(self, mode: str, source: str) -> PromptTemplates:
        """Return a copy with ``mode`` added or replaced."""
        return PromptTemplates({**self.templates, mode: source})

    @property
    def modes(self) -> tuple[str, ...]:
        return tuple(self.templates)

    def source_for(self, mode: str) -> str:
        """Template source for ``mode``.

        Raises:
            PromptError: ``mode`` is not one of the configured modes.
        """
        try:
            return self.templates[mode]
        except KeyError:
            valid = ", ".join(f"'{m}'" for m in self.modes)
            raise PromptError(
                f"Unknown prompt mode '{mode}'. Choose one of: {valid}"
            ) from None

    def __contains__(self, mode: object) -> bool:
        return mode in self.templates

    def __iter__(self) -> Iterator[str]:
        return iter(self.templates)

    def __len__(self) -> int:
        return len(self.templates)
