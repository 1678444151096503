"""
proofspec Observability Layer

Logging setup and span tracing of data source calls.
"""

from proofspec.observability.logging import JsonFormatter, configure_logging
from proofspec.observability.tracer import (
    Span,
    SpanKind,
    SpanStatus,
    Tracer,
    get_tracer,
    reset_tracers,
)

__all__ = [
    # Logging
    "configure_logging",
    "JsonFormatter",
    # Tracer
    "Tracer",
    "Span",
    "SpanKind",
    "SpanStatus",
    "get_tracer",
    "reset_tracers",
]
