"""Provider transport: the four remote operations the client depends on.

``GenerationTransport`` is the seam used by the offloader and the client;
tests substitute an in-memory fake. ``GoogleGenAITransport`` implements it on
top of the ``google-genai`` async client and is the only module that touches
SDK types.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import io
import logging
from typing import Any, Protocol, runtime_checkable

from google import genai
from google.genai import types

from ..types import (  # noqa: TID252
    BlobState,
    FileRefPart,
    InlineDataPart,
    Part,
    TextPart,
    UploadedBlob,
)

log = logging.getLogger(__name__)


@runtime_checkable
class GenerationTransport(Protocol):
    """Remote operations against the generative-AI provider.

    ``config`` is a neutral mapping built by the client (see
    ``build_generate_config``); implementations translate it.
    """

    async def generate_content(
        self, model: str, contents: Sequence[Part], config: Mapping[str, Any]
    ) -> Any: ...

    async def upload_blob(
        self, data: bytes, mime_type: str, display_name: str
    ) -> UploadedBlob: ...

    async def get_blob(self, name: str) -> UploadedBlob: ...

    async def delete_blob(self, name: str) -> None: ...


_FILE_STATES = {
    "PROCESSING": BlobState.PROCESSING,
    "ACTIVE": BlobState.ACTIVE,
    "FAILED": BlobState.FAILED,
}


def _blob_from_file(file: types.File) -> UploadedBlob:
    state = getattr(file.state, "name", None) or str(file.state or "")
    return UploadedBlob(
        name=file.name or "",
        uri=file.uri or "",
        state=_FILE_STATES.get(state.upper(), BlobState.UPLOADING),
        mime_type=file.mime_type,
        display_name=file.display_name,
    )


def to_sdk_part(part: Part) -> types.Part:
    """Convert a library part into an SDK ``Part``."""
    if isinstance(part, TextPart):
        return types.Part(text=part.text)
    if isinstance(part, InlineDataPart):
        return types.Part(
            inline_data=types.Blob(data=part.data, mime_type=part.mime_type)
        )
    if isinstance(part, FileRefPart):
        return types.Part(
            file_data=types.FileData(file_uri=part.uri, mime_type=part.mime_type)
        )
    raise TypeError(f"Unsupported part type: {type(part).__name__}")


def to_sdk_config(config: Mapping[str, Any]) -> types.GenerateContentConfig:
    """Translate the neutral config mapping into ``GenerateContentConfig``."""
    sdk_config = types.GenerateContentConfig(
        temperature=config.get("temperature"),
        top_p=config.get("top_p"),
        candidate_count=config.get("candidate_count"),
        seed=config.get("seed"),
    )
    if system_instruction := config.get("system_instruction"):
        sdk_config.system_instruction = system_instruction
    if safety_settings := config.get("safety_settings"):
        sdk_config.safety_settings = [
            types.SafetySetting(category=s.category, threshold=s.threshold)
            for s in safety_settings
        ]
    # Not every model accepts an image config, so only send it when asked
    if aspect_ratio := config.get("aspect_ratio"):
        sdk_config.image_config = types.ImageConfig(aspect_ratio=aspect_ratio)
    return sdk_config


class GoogleGenAITransport:
    """``GenerationTransport`` backed by ``genai.Client(...).aio``."""

    def __init__(
        self,
        api_key: str,
        *,
        request_timeout: float | None = None,
        client: genai.Client | None = None,
    ):
        if client is None:
            http_options = None
            if request_timeout:
                # The SDK expects milliseconds
                http_options = types.HttpOptions(timeout=int(request_timeout * 1000))
            client = genai.Client(api_key=api_key, http_options=http_options)
        self._client = client

    async def generate_content(
        self, model: str, contents: Sequence[Part], config: Mapping[str, Any]
    ) -> types.GenerateContentResponse:
        sdk_contents = [
            types.Content(role="user", parts=[to_sdk_part(p) for p in contents])
        ]
        return await self._client.aio.models.generate_content(
            model=model,
            contents=sdk_contents,
            config=to_sdk_config(config),
        )

    async def upload_blob(
        self, data: bytes, mime_type: str, display_name: str
    ) -> UploadedBlob:
        file = await self._client.aio.files.upload(
            file=io.BytesIO(data),
            config=types.UploadFileConfig(
                mime_type=mime_type, display_name=display_name
            ),
        )
        log.debug("Uploaded %d bytes as %s", len(data), file.name)
        return _blob_from_file(file)

    async def get_blob(self, name: str) -> UploadedBlob:
        return _blob_from_file(await self._client.aio.files.get(name=name))

    async def delete_blob(self, name: str) -> None:
        await self._client.aio.files.delete(name=name)
