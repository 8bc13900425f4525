import pytest

from ai_client.exceptions import ErrorKind, PromptError
from ai_client.prompts import PromptBuilder, PromptTemplates

pytestmark = pytest.mark.unit


class TestPromptTemplates:
    def test_default_modes(self):
        assert PromptTemplates.default().modes == ("solo", "dialogue")

    def test_with_template_returns_a_new_set(self):
        base = PromptTemplates.default()
        extended = base.with_template("summary", "Summarize: {{ content }}")
        assert "summary" in extended
        assert "summary" not in base

    @pytest.mark.parametrize(
        "templates", [{"": "text"}, {"solo": ""}, {"solo": "   "}]
    )
    def test_invalid_entries_are_rejected(self, templates):
        with pytest.raises(PromptError):
            PromptTemplates(templates)

    def test_unknown_mode_lists_valid_modes(self):
        with pytest.raises(PromptError, match="'solo', 'dialogue'") as exc_info:
            PromptTemplates.default().source_for("sonnet")
        assert exc_info.value.kind is ErrorKind.INVALID_INPUT


class TestPromptBuilder:
    @pytest.mark.parametrize(
        ("mode", "marker"), [("solo", "single narrator"), ("dialogue", "two speakers")]
    )
    def test_builtin_modes_embed_content(self, mode, marker):
        prompt = PromptBuilder().build("AI enriches everyday life.", mode)
        assert marker in prompt
        assert "[Input text]\nAI enriches everyday life." in prompt

    def test_content_is_not_escaped(self):
        templates = PromptTemplates({"raw": "<<{{ content }}>>"})
        assert PromptBuilder(templates).build("a < b & c", "raw") == "<<a < b & c>>"

    def test_unknown_mode(self):
        with pytest.raises(PromptError, match="Unknown prompt mode"):
            PromptBuilder().build("text", "haiku")

    def test_syntax_error_is_reported(self):
        builder = PromptBuilder(PromptTemplates({"broken": "{{ content "}))
        with pytest.raises(PromptError, match="Invalid 'broken' template"):
            builder.build("text", "broken")

    def test_undefined_variable_is_an_error(self):
        builder = PromptBuilder(PromptTemplates({"strict": "{{ content }} {{ topic }}"}))
        with pytest.raises(PromptError, match="Failed to render"):
            builder.build("text", "strict")
