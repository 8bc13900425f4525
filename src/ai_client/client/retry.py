"""Bounded retry with exponential backoff for async operations"""  # noqa: D415

import asyncio
from collections.abc import Awaitable, Callable
import logging
from typing import TypeAlias, TypeVar

from ..exceptions import RetriesExhaustedError  # noqa: TID252
from ..telemetry import TelemetryContext, TelemetryContextProtocol  # noqa: TID252
from ..types import RetryPolicy  # noqa: TID252

log = logging.getLogger(__name__)

T = TypeVar("T")

Sleep: TypeAlias = Callable[[float], Awaitable[object]]


async def execute_with_retry(
    policy: RetryPolicy,
    label: str,
    operation: Callable[[], Awaitable[T]],
    should_retry: Callable[[BaseException], bool],
    *,
    sleep: Sleep = asyncio.sleep,
    telemetry: TelemetryContextProtocol | None = None,
) -> T:
    """Run ``operation`` until it succeeds, up to ``policy.max_attempts`` times.

    A failure rejected by ``should_retry`` is re-raised unchanged. When every
    attempt fails with retryable errors, ``RetriesExhaustedError`` is raised
    from the last one. Backoff waits go through ``sleep`` and are cancellable;
    cancellation propagates as ``asyncio.CancelledError``. ``label`` is only
    used for logs and telemetry.
    """
    tele = telemetry or TelemetryContext()
    last_error: Exception | None = None

    for attempt in range(policy.max_attempts):
        if attempt:
            delay = policy.delay_for(attempt - 1)
            log.warning(
                "%s failed with retryable error: %s. Retrying in %.2fs (Attempt %d/%d)",
                label,
                last_error,
                delay,
                attempt + 1,
                policy.max_attempts,
            )
            await sleep(delay)
        try:
            result = await operation()
        except Exception as error:
            if not should_retry(error):
                tele.count("non_retryable_errors", label=label)
                log.debug("%s failed with non-retryable error: %r", label, error)
                raise
            tele.count("retryable_errors", label=label)
            last_error = error
            continue
        tele.metric("attempts", attempt + 1, label=label)
        return result

    tele.count("retries_exhausted", label=label)
    log.error("%s failed after %d attempts.", label, policy.max_attempts)
    final_error: Exception = (
        last_error if last_error is not None else RuntimeError("no attempt made")
    )
    raise RetriesExhaustedError(label, policy.max_attempts, final_error) from final_error
