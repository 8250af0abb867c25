"""Property-based tests for trace context management."""

import uuid

from hypothesis import given
from hypothesis import strategies as st

from src.utils.trace_context import (
    clear_trace,
    create_trace,
    get_current_trace,
    set_trace,
    trace_scope,
)


class TestTraceContextManagement:
    """Tests for trace context management."""

    @given(num_operations=st.integers(min_value=1, max_value=10))
    def test_trace_id_persists_until_cleared(self, num_operations):
        """
        For any traced operation, the trace ID SHALL stay current across nested
        calls until it is cleared.
        """
        clear_trace()
        trace_id = create_trace()
        uuid.UUID(trace_id)

        for _ in range(num_operations):
            assert get_current_trace() == trace_id

        clear_trace()
        assert get_current_trace() is None

    @given(trace_ids=st.lists(st.uuids(), min_size=1, max_size=5, unique=True))
    def test_set_trace_replaces_current(self, trace_ids):
        clear_trace()
        for trace_id in trace_ids:
            set_trace(str(trace_id))
            assert get_current_trace() == str(trace_id)
        clear_trace()

    def test_trace_scope_restores_previous(self):
        clear_trace()
        set_trace("outer")

        with trace_scope("inner") as trace_id:
            assert trace_id == "inner"
            assert get_current_trace() == "inner"

        assert get_current_trace() == "outer"
        clear_trace()

    def test_trace_scope_generates_id(self):
        clear_trace()
        with trace_scope() as trace_id:
            uuid.UUID(trace_id)
            assert get_current_trace() == trace_id
        assert get_current_trace() is None
