from google.genai import types
import pytest

from ai_client.client.response_extractor import extract_text, finish_reason_name
from ai_client.exceptions import ErrorKind, ResponseRejectedError
from tests.fakes import make_response

pytestmark = pytest.mark.unit


class TestFinishReasons:
    @pytest.mark.parametrize(
        "reason",
        [
            types.FinishReason.SAFETY,
            types.FinishReason.RECITATION,
            types.FinishReason.MAX_TOKENS,
            types.FinishReason.OTHER,
        ],
    )
    @pytest.mark.parametrize("allow_empty", [True, False])
    def test_blocking_reason_rejects_regardless_of_content(self, reason, allow_empty):
        """Should reject even when the candidate carries text"""
        response = make_response("still has text", finish_reason=reason)
        with pytest.raises(ResponseRejectedError) as exc_info:
            extract_text(response, allow_empty=allow_empty)
        assert exc_info.value.reason == f"blocked: {reason.value}"
        assert exc_info.value.kind is ErrorKind.CONTENT_BLOCKED

    @pytest.mark.parametrize(
        "reason", [None, types.FinishReason.STOP, types.FinishReason.FINISH_REASON_UNSPECIFIED]
    )
    def test_normal_reasons_are_accepted(self, reason):
        response = make_response("hello", finish_reason=reason)
        assert extract_text(response, allow_empty=False) == "hello"

    def test_reason_name_normalizes_strings(self):
        assert finish_reason_name("stop") == "STOP"
        assert finish_reason_name(None) == "FINISH_REASON_UNSPECIFIED"


class TestContent:
    @pytest.mark.parametrize("allow_empty", [True, False])
    def test_no_candidates_is_rejected(self, allow_empty):
        with pytest.raises(ResponseRejectedError, match="empty response"):
            extract_text(make_response(candidates=False), allow_empty=allow_empty)

    def test_returns_first_non_empty_text_part(self):
        response = types.GenerateContentResponse(
            candidates=[
                types.Candidate(
                    content=types.Content(
                        role="model",
                        parts=[types.Part(text=""), types.Part(text="second")],
                    ),
                    finish_reason=types.FinishReason.STOP,
                )
            ]
        )
        assert extract_text(response, allow_empty=False) == "second"

    def test_text_only_empty_content_is_rejected(self):
        with pytest.raises(ResponseRejectedError, match="empty content"):
            extract_text(make_response(None), allow_empty=False)

    def test_multimodal_empty_content_is_empty_text(self):
        response = make_response(None, images=[(b"\x89PNG", "image/png")])
        assert extract_text(response, allow_empty=True) == ""

    def test_candidate_without_content(self):
        response = types.GenerateContentResponse(
            candidates=[types.Candidate(finish_reason=types.FinishReason.STOP)]
        )
        assert extract_text(response, allow_empty=True) == ""
        with pytest.raises(ResponseRejectedError, match="empty content"):
            extract_text(response, allow_empty=False)
