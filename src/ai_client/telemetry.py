"""Telemetry scopes and reporters for the generation client.

Disabled by default: ``TelemetryContext()`` hands back a shared no-op object
so instrumented code pays almost nothing. Set ``AI_CLIENT_TELEMETRY=1`` (or
``DEBUG=1``) and pass reporters to collect timings and metrics per scope,
e.g. ``client.generate_text`` or ``offload.upload``.
"""

from collections import deque
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
import logging
import os
import time
from types import TracebackType
from typing import Any, Protocol, Self, TypeAlias, runtime_checkable

log = logging.getLogger(__name__)

# Scope nesting is tracked per task so concurrent uploads do not interleave
_scope_stack_var: ContextVar[tuple[str, ...]] = ContextVar(
    "ai_client_scope_stack",
    default=(),
)


def telemetry_enabled() -> bool:
    return os.getenv("AI_CLIENT_TELEMETRY") == "1" or os.getenv("DEBUG") == "1"


@runtime_checkable
class TelemetryReporter(Protocol):
    """Duck-typed protocol for telemetry reporters."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...  # noqa: D102


@dataclass(frozen=True, slots=True)
class _NoOpTelemetryContext:
    """Stateless stand-in used whenever telemetry is off."""

    def __call__(self, name: str, **metadata: Any) -> Self:  # noqa: ARG002
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        return None

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        pass

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass


class _EnabledTelemetryContext:
    """Forwards scope timings and metrics to every reporter."""

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self.reporters = reporters

    def __call__(
        self, name: str, **metadata: Any
    ) -> AbstractContextManager["_EnabledTelemetryContext"]:
        return self._scope(name, **metadata)

    @contextmanager
    def _scope(
        self, name: str, **metadata: Any
    ) -> Iterator["_EnabledTelemetryContext"]:
        if not name or not isinstance(name, str):
            raise ValueError("Scope name must be a non-empty string")

        stack = _scope_stack_var.get()
        scope_path = ".".join((*stack, name))
        token = _scope_stack_var.set((*stack, name))
        start = time.perf_counter()
        failed = False
        try:
            yield self
        except BaseException:
            failed = True
            raise
        finally:
            duration = time.perf_counter() - start
            _scope_stack_var.reset(token)
            self._emit(
                "record_timing",
                scope_path,
                duration,
                depth=len(stack),
                parent_scope=".".join(stack) if stack else None,
                failed=failed,
                **metadata,
            )

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        """Record a metric under the current scope."""
        stack = _scope_stack_var.get()
        self._emit(
            "record_metric",
            ".".join((*stack, name)),
            value,
            depth=len(stack),
            parent_scope=".".join(stack) if stack else None,
            **metadata,
        )

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        """Record a counter metric."""
        self.metric(name, increment, metric_type="counter", **metadata)

    def _emit(self, method: str, scope: str, value: Any, **metadata: Any) -> None:
        for reporter in self.reporters:
            try:
                getattr(reporter, method)(scope, value, **metadata)
            except Exception as e:
                # A broken reporter must never break a generation call
                log.error(
                    "Telemetry reporter '%s' failed: %s",
                    type(reporter).__name__,
                    e,
                    exc_info=True,
                )


_NO_OP_SINGLETON = _NoOpTelemetryContext()

TelemetryContextProtocol: TypeAlias = _EnabledTelemetryContext | _NoOpTelemetryContext


def TelemetryContext(*reporters: TelemetryReporter) -> TelemetryContextProtocol:  # noqa: N802
    """Return a telemetry context.

    Returns the shared no-op instance unless telemetry is enabled through the
    environment and at least one reporter is supplied.
    """
    if reporters and telemetry_enabled():
        return _EnabledTelemetryContext(*reporters)
    return _NO_OP_SINGLETON


class SimpleReporter:
    """In-memory reporter for development and tests.

    Keeps the most recent ``max_entries_per_scope`` values per scope.
    """

    def __init__(self, max_entries_per_scope: int = 1000):
        self.max_entries = max_entries_per_scope
        self.timings: dict[str, deque[tuple[float, dict[str, Any]]]] = {}
        self.metrics: dict[str, deque[tuple[Any, dict[str, Any]]]] = {}

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        self.timings.setdefault(scope, deque(maxlen=self.max_entries)).append(
            (duration, metadata)
        )

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        self.metrics.setdefault(scope, deque(maxlen=self.max_entries)).append(
            (value, metadata)
        )

    def get_report(self) -> str:
        """Render a flat report of call counts and totals per scope."""
        lines = ["=== Telemetry Report ==="]
        if self.timings:
            lines.append("--- Timings ---")
            for scope, values in sorted(self.timings.items()):
                durations = [v[0] for v in values]
                lines.append(
                    f"{scope:<40} | Calls: {len(durations):<4} | "
                    f"Avg: {sum(durations) / len(durations):.4f}s | "
                    f"Total: {sum(durations):.4f}s"
                )
        if self.metrics:
            lines.append("--- Metrics ---")
            for scope, values in sorted(self.metrics.items()):
                total = sum(v[0] for v in values if isinstance(v[0], int | float))
                lines.append(
                    f"{scope:<40} | Count: {len(values):<4} | Total: {total:,.0f}"
                )
        return "\n".join(lines)
