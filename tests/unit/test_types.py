import dataclasses

import pytest

from ai_client.exceptions import ErrorKind, ValidationError
from ai_client.types import (
    BlobState,
    FileRefPart,
    GenerationOptions,
    GenerationRequest,
    GenerationResult,
    InlineDataPart,
    TextPart,
    UploadedBlob,
)
from tests.fakes import make_response

pytestmark = pytest.mark.unit


class TestParts:
    def test_bytearray_is_frozen_to_bytes(self):
        part = InlineDataPart(bytearray(b"abc"), "image/png")
        assert part.data == b"abc"
        assert isinstance(part.data, bytes)
        assert part.size_bytes == 3

    @pytest.mark.parametrize(
        ("factory", "exc"),
        [
            (lambda: TextPart(123), TypeError),  # type: ignore[arg-type]
            (lambda: InlineDataPart(b"x", ""), TypeError),
            (lambda: InlineDataPart("x", "text/plain"), TypeError),  # type: ignore[arg-type]
            (lambda: FileRefPart(""), TypeError),
        ],
    )
    def test_invalid_parts(self, factory, exc):
        with pytest.raises(exc):
            factory()

    def test_parts_are_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            TextPart("a").text = "b"  # type: ignore[misc]


class TestGenerationRequest:
    def test_prompt_request(self):
        request = GenerationRequest(prompt="hi")
        assert not request.is_multimodal

    def test_parts_list_is_frozen(self):
        parts = [TextPart("a")]
        request = GenerationRequest(parts=parts)  # type: ignore[arg-type]
        parts.append(TextPart("b"))
        assert request.parts == (TextPart("a"),)
        assert request.is_multimodal

    @pytest.mark.parametrize(
        "kwargs", [{}, {"prompt": "a", "parts": (TextPart("b"),)}]
    )
    def test_exactly_one_of_prompt_or_parts(self, kwargs):
        with pytest.raises(ValueError):
            GenerationRequest(**kwargs)


class TestOptions:
    @pytest.mark.parametrize(
        "kwargs",
        [{"temperature": 1.2}, {"top_p": -0.1}, {"candidate_count": 0}],
    )
    def test_out_of_range(self, kwargs):
        """Should reject bad options as invalid input the CLI can map"""
        with pytest.raises(ValidationError) as exc_info:
            GenerationOptions(**kwargs)
        assert exc_info.value.kind is ErrorKind.INVALID_INPUT


class TestResults:
    def test_blob_state_transition(self):
        blob = UploadedBlob(name="files/a")
        assert blob.state is BlobState.UPLOADING
        assert blob.with_state(BlobState.ACTIVE).state is BlobState.ACTIVE
        assert blob.state is BlobState.UPLOADING

    def test_inline_images(self):
        response = make_response("caption", images=[(b"png-bytes", "image/png")])
        result = GenerationResult(text="caption", raw_response=response)
        assert result.inline_images() == [InlineDataPart(b"png-bytes", "image/png")]

    def test_inline_images_without_response(self):
        assert GenerationResult(text="x").inline_images() == []
