"""
Large-payload offload to the Files API.

Inline parts above the size threshold are uploaded concurrently, polled until
the provider reports them ACTIVE, and replaced by file references. Every blob
uploaded for a call is deleted when the ``offload`` context exits, whether the
call succeeded, failed or was cancelled.
"""  # noqa: D200, D212, D415

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import asynccontextmanager, nullcontext
import logging
import time

from ..constants import (  # noqa: TID252
    FILE_DISPLAY_NAME_PREFIX,
    FILE_OFFLOAD_THRESHOLD,
    FILE_POLL_INTERVAL,
    FILE_PROCESSING_TIMEOUT,
)
from ..exceptions import UploadError, UploadTimeoutError  # noqa: TID252
from ..telemetry import TelemetryContext, TelemetryContextProtocol  # noqa: TID252
from ..types import (  # noqa: TID252
    BlobState,
    FileRefPart,
    InlineDataPart,
    Part,
    UploadedBlob,
)
from .transport import GenerationTransport

log = logging.getLogger(__name__)


class _BlobLedger:
    """Blobs uploaded during one call.

    Upload tasks record into it concurrently; the lock serializes access.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._blobs: dict[str, UploadedBlob] = {}

    async def add(self, blob: UploadedBlob) -> None:
        async with self._lock:
            self._blobs[blob.name] = blob

    async def discard(self, name: str) -> bool:
        async with self._lock:
            return self._blobs.pop(name, None) is not None

    async def drain(self) -> list[UploadedBlob]:
        async with self._lock:
            blobs = list(self._blobs.values())
            self._blobs.clear()
            return blobs


class LargePayloadOffloader:
    """Moves oversized inline parts out of the request body"""  # noqa: D415

    def __init__(  # noqa: D107
        self,
        transport: GenerationTransport,
        *,
        threshold: int = FILE_OFFLOAD_THRESHOLD,
        poll_interval: float = FILE_POLL_INTERVAL,
        poll_timeout: float = FILE_PROCESSING_TIMEOUT,
        max_concurrency: int | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        telemetry: TelemetryContextProtocol | None = None,
    ):
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1 when provided")
        self.transport = transport
        self.threshold = threshold
        self.poll_interval = poll_interval
        self.poll_timeout = poll_timeout
        self.max_concurrency = max_concurrency
        self._sleep = sleep
        self._tele = telemetry or TelemetryContext()
        self._background: set[asyncio.Future[object]] = set()

    def oversized(self, parts: Sequence[Part]) -> list[tuple[int, InlineDataPart]]:
        """Return ``(index, part)`` for every inline part above the threshold."""
        return [
            (i, p)
            for i, p in enumerate(parts)
            if isinstance(p, InlineDataPart) and p.size_bytes > self.threshold
        ]

    @asynccontextmanager
    async def offload(self, parts: Sequence[Part]) -> AsyncIterator[tuple[Part, ...]]:
        """Yield a copy of ``parts`` with oversized inline data offloaded.

        The input sequence is never modified. If any upload fails, the error
        is raised before the body runs, so no partial request can be sent.

        Raises:
            UploadError: An upload, status poll or server-side processing failed.
            UploadTimeoutError: A file did not become ACTIVE within ``poll_timeout``.
        """
        marked = self.oversized(parts)
        if not marked:
            yield tuple(parts)
            return

        ledger = _BlobLedger()
        try:
            with self._tele("offload.upload", parts=len(marked)):
                replacements = await self._upload_all(marked, ledger)
            effective = list(parts)
            for index, ref in replacements:
                effective[index] = ref
            self._tele.metric("offloaded_parts", len(replacements))
            yield tuple(effective)
        finally:
            await self._cleanup(ledger)

    async def wait_for_background(self) -> None:
        """Wait for detached deletions (timed-out or interrupted cleanups)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # --- Upload phase ---

    async def _upload_all(
        self,
        marked: list[tuple[int, InlineDataPart]],
        ledger: _BlobLedger,
    ) -> list[tuple[int, FileRefPart]]:
        limiter = (
            asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        )
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(self._upload_one(i, p, ledger, limiter))
                    for i, p in marked
                ]
        except ExceptionGroup as failures:
            # First failure wins; siblings were already cancelled by the group
            first = failures.exceptions[0]
            log.error("Parallel upload to the Files API failed: %s", first)
            raise first  # noqa: B904
        return [task.result() for task in tasks]

    async def _upload_one(
        self,
        index: int,
        part: InlineDataPart,
        ledger: _BlobLedger,
        limiter: asyncio.Semaphore | None,
    ) -> tuple[int, FileRefPart]:
        async with limiter or nullcontext():
            display_name = f"{FILE_DISPLAY_NAME_PREFIX}-{time.time_ns()}-{index}"
            log.info(
                "Offloading %d-byte inline part #%d (%s) to the Files API",
                part.size_bytes,
                index,
                part.mime_type,
            )
            try:
                blob = await self.transport.upload_blob(
                    part.data, part.mime_type, display_name
                )
            except Exception as e:
                raise UploadError(
                    f"Failed to upload large inline data to File API: {e}"
                ) from e
            await ledger.add(blob)

            active = await self._wait_until_active(blob, ledger)
            uri = active.uri or blob.uri
            if not uri:
                raise UploadError(f"Uploaded file has no URI: {blob.name}")
            log.info("Offloaded part #%d to %s", index, uri)
            return index, FileRefPart(uri=uri, mime_type=part.mime_type)

    async def _wait_until_active(
        self, blob: UploadedBlob, ledger: _BlobLedger
    ) -> UploadedBlob:
        """Poll the file at a fixed interval until ACTIVE, FAILED or timeout."""
        try:
            async with asyncio.timeout(self.poll_timeout):
                while True:
                    await self._sleep(self.poll_interval)
                    try:
                        current = await self.transport.get_blob(blob.name)
                    except Exception as e:
                        raise UploadError(
                            f"Failed to get file status for {blob.name}: {e}"
                        ) from e

                    if current.state is BlobState.ACTIVE:
                        return current
                    if current.state is BlobState.FAILED:
                        raise UploadError(
                            f"File processing failed on server side: {blob.name}"
                        )
                    if current.state is BlobState.PROCESSING:
                        log.debug("File API processing %s", blob.name)
                    else:
                        log.warning(
                            "Unknown file state for %s: %s",
                            blob.name,
                            current.state.value,
                        )
        except TimeoutError as e:
            # The caller's scope may already be gone; clean up on a detached task
            if await ledger.discard(blob.name):
                self._delete_detached(blob)
            raise UploadTimeoutError(
                f"File processing timed out after {self.poll_timeout}s: {blob.name}"
            ) from e

    # --- Cleanup phase ---

    async def _cleanup(self, ledger: _BlobLedger) -> None:
        blobs = await ledger.drain()
        if not blobs:
            return
        with self._tele("offload.cleanup", blobs=len(blobs)):
            deletion = asyncio.gather(*(self._delete_quietly(b) for b in blobs))
            self._track(deletion)
            # Shielded so a cancelled call still removes its temporary files
            results = await asyncio.shield(deletion)
            deleted = sum(r.state is BlobState.DELETED for r in results)
            self._tele.count("deleted_files", deleted)
            if deleted < len(results):
                log.info(
                    "Deleted %d of %d uploaded file(s); the rest expire server-side",
                    deleted,
                    len(results),
                )

    def _delete_detached(self, blob: UploadedBlob) -> None:
        self._track(asyncio.ensure_future(self._delete_quietly(blob)))

    def _track(self, future: asyncio.Future[object]) -> None:
        self._background.add(future)
        future.add_done_callback(self._background.discard)

    async def _delete_quietly(self, blob: UploadedBlob) -> UploadedBlob:
        """Delete ``blob``; the returned handle is DELETED only on success."""
        try:
            await self.transport.delete_blob(blob.name)
        except Exception as e:
            log.warning("Failed to delete uploaded file %s: %s", blob.name, e)
            return blob
        log.debug("Deleted uploaded file %s", blob.name)
        return blob.with_state(BlobState.DELETED)
