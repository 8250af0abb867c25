"""Trace context for correlating log entries of a single request."""

import contextvars
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Optional

TRACE_HEADER = "X-Trace-Id"

_trace_id_context: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "trace_id", default=None
)


def create_trace() -> str:
    """
    Generate a new trace ID and set it in the current context.

    Returns:
        A unique trace ID string (UUID4 format)
    """
    trace_id = str(uuid.uuid4())
    set_trace(trace_id)
    return trace_id


def get_current_trace() -> Optional[str]:
    """Return the current trace ID, or None outside a traced operation."""
    return _trace_id_context.get()


def set_trace(trace_id: str) -> None:
    _trace_id_context.set(trace_id)


def clear_trace() -> None:
    """Clear the trace ID from the current context."""
    _trace_id_context.set(None)


@contextmanager
def trace_scope(trace_id: Optional[str] = None) -> Iterator[str]:
    """
    Run a block under a trace ID, restoring the previous one afterwards.

    Args:
        trace_id: Incoming trace ID to reuse; a new one is generated if omitted
    """
    token = _trace_id_context.set(trace_id or str(uuid.uuid4()))
    try:
        yield _trace_id_context.get()
    finally:
        _trace_id_context.reset(token)
