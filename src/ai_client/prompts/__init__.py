"""Prompt templates and the builder that renders them."""

from .builder import PromptBuilder, create_environment
from .templates import (
    DEFAULT_TEMPLATES,
    DIALOGUE_TEMPLATE,
    SOLO_TEMPLATE,
    PromptTemplates,
)

__all__ = [  # noqa: RUF022
    "PromptBuilder",
    "PromptTemplates",
    "create_environment",
    "DEFAULT_TEMPLATES",
    "SOLO_TEMPLATE",
    "DIALOGUE_TEMPLATE",
]
