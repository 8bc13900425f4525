"""Text extraction and validation for generate_content responses"""  # noqa: D415

from typing import Any

from ..exceptions import ResponseRejectedError  # noqa: TID252

# Finish reasons that mean "generation ended normally"
ACCEPTED_FINISH_REASONS = frozenset({"FINISH_REASON_UNSPECIFIED", "STOP"})


def finish_reason_name(reason: Any) -> str:
    """Normalize an SDK finish reason (enum, str or None) to its upper-case name."""
    if reason is None:
        return "FINISH_REASON_UNSPECIFIED"
    value = getattr(reason, "value", reason)
    name = str(value).upper()
    return name or "FINISH_REASON_UNSPECIFIED"


def extract_text(response: Any, *, allow_empty: bool) -> str:
    """Return the first non-empty text part of the first candidate.

    ``allow_empty`` is set for multimodal calls, where a candidate may carry
    only binary output (reachable through the raw response) and an empty
    string is a valid result. Text-only calls reject empty content.

    Raises:
        ResponseRejectedError: No candidates, a blocking finish reason, or
            (text-only) no text in the candidate.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        raise ResponseRejectedError("empty response")

    candidate = candidates[0]
    reason = finish_reason_name(getattr(candidate, "finish_reason", None))
    if reason not in ACCEPTED_FINISH_REASONS:
        raise ResponseRejectedError(f"blocked: {reason}")

    content = getattr(candidate, "content", None)
    parts = getattr(content, "parts", None) or []
    for part in parts:
        text = getattr(part, "text", None)
        if text:
            return text

    if allow_empty:
        return ""
    raise ResponseRejectedError("empty content")
