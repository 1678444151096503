"""
proofspec Tracer

Structured tracing of data source calls using OpenTelemetry-compatible span
records. Spans are kept in memory and, in debug mode, appended to JSONL files.
"""

import json
import time
import uuid
from collections import deque
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Generator

from proofspec.config import get_settings

# Spans kept in memory per tracer; older spans are dropped
MAX_RECORDED_SPANS = 1000


class SpanKind(str, Enum):
    """Span types for categorization."""

    INTERNAL = "internal"
    CLIENT = "client"  # Data source calls


class SpanStatus(str, Enum):
    """Span completion status."""

    UNSET = "unset"
    OK = "ok"
    ERROR = "error"


@dataclass
class Span:
    """
    Trace span representing a unit of work.

    Attributes:
        trace_id: Unique trace identifier.
        span_id: Unique span identifier.
        parent_id: Parent span ID (None for root).
        name: Operation name.
        kind: Span type.
        start_time: Start timestamp.
        end_time: End timestamp (set on completion).
        status: Completion status.
        attributes: Key-value metadata.
    """

    trace_id: str
    span_id: str
    name: str
    kind: SpanKind = SpanKind.INTERNAL
    parent_id: str | None = None
    start_time: float = field(default_factory=time.time)
    end_time: float | None = None
    status: SpanStatus = SpanStatus.UNSET
    status_message: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float | None:
        """Duration in milliseconds."""
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time) * 1000

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def set_status(self, status: SpanStatus, message: str | None = None) -> None:
        self.status = status
        self.status_message = message

    def end(self) -> None:
        if self.end_time is None:
            self.end_time = time.time()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "trace_id": self.trace_id,
            "span_id": self.span_id,
            "parent_id": self.parent_id,
            "name": self.name,
            "kind": self.kind.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_ms": self.duration_ms,
            "status": self.status.value,
            "status_message": self.status_message,
            "attributes": self.attributes,
        }


class Tracer:
    """
    Tracer for data source calls.

    Usage:
        tracer = Tracer("proofspec.proofs")

        with tracer.span("get_data", SpanKind.CLIENT) as span:
            span.set_attribute("data_set", name)
            result = await data_source.get_data(name)
            span.set_attribute("status", result.status.value)
    """

    def __init__(
        self, name: str, trace_id: str | None = None, export_path: Path | None = None
    ) -> None:
        """
        Initialize tracer.

        Args:
            name: Tracer name (e.g., module name).
            trace_id: Existing trace ID (for continuation).
            export_path: Path to export traces (optional).
        """
        self._name = name
        self._trace_id = trace_id or self._generate_id()
        self._export_path = export_path
        self._spans: deque[Span] = deque(maxlen=MAX_RECORDED_SPANS)
        # Current span of the running task
        self._current_span: ContextVar[Span | None] = ContextVar(f"{name}.span", default=None)

    @staticmethod
    def _generate_id() -> str:
        return uuid.uuid4().hex[:16]

    @property
    def trace_id(self) -> str:
        return self._trace_id

    @property
    def current_span(self) -> Span | None:
        return self._current_span.get()

    @contextmanager
    def span(
        self,
        name: str,
        kind: SpanKind = SpanKind.INTERNAL,
        attributes: dict[str, Any] | None = None,
    ) -> Generator[Span, None, None]:
        """
        Context manager for creating and managing spans.

        Exceptions mark the span as failed and are re-raised unchanged.
        """
        parent = self._current_span.get()
        parent_id = parent.span_id if parent else None

        span = Span(
            trace_id=self._trace_id,
            span_id=self._generate_id(),
            parent_id=parent_id,
            name=f"{self._name}.{name}",
            kind=kind,
            attributes=attributes or {},
        )

        token = self._current_span.set(span)

        try:
            yield span
            if span.status == SpanStatus.UNSET:
                span.set_status(SpanStatus.OK)
        except Exception as e:
            span.set_status(SpanStatus.ERROR, f"{type(e).__name__}: {e}")
            raise
        finally:
            span.end()
            self._spans.append(span)
            self._current_span.reset(token)

            if self._export_path:
                self._export_span(span)

    def _export_span(self, span: Span) -> None:
        if self._export_path is None:
            return

        self._export_path.mkdir(parents=True, exist_ok=True)
        day = datetime.now(timezone.utc).strftime("%Y%m%d")
        filename = f"trace_{self._trace_id}_{day}.jsonl"

        with open(self._export_path / filename, "a") as f:
            f.write(json.dumps(span.to_dict(), default=str) + "\n")

    def get_spans(self) -> list[Span]:
        """Get all recorded spans."""
        return list(self._spans)


# Global tracer registry
_tracers: dict[str, Tracer] = {}


def get_tracer(name: str, trace_id: str | None = None) -> Tracer:
    """
    Get or create a tracer by name.

    Args:
        name: Tracer name (typically module name).
        trace_id: Optional trace ID for continuation.
    """
    key = f"{name}:{trace_id or 'default'}"
    if key not in _tracers:
        settings = get_settings()
        export_path = settings.trace_path if settings.features.debug else None
        _tracers[key] = Tracer(name, trace_id, export_path)
    return _tracers[key]


def reset_tracers() -> None:
    """Reset all tracers (for testing)."""
    global _tracers
    _tracers = {}
