"""Tests for telemetry primitives: Span, trace_span, @traced."""

from __future__ import annotations

import time

import pytest

from promptseal.services.result import ServiceResult
from promptseal.services.telemetry import (
    Span,
    enable_telemetry,
    get_current_span,
    trace_span,
    traced,
)


class TestSpan:
    def test_duration_before_end_is_zero(self) -> None:
        assert Span(name="s").duration_ms == 0.0

    def test_duration_after_end(self) -> None:
        span = Span(name="s")
        time.sleep(0.002)
        span.end()
        assert span.duration_ms > 0

    def test_to_dict_minimal(self) -> None:
        span = Span(name="root")
        span.end()
        assert set(span.to_dict()) == {"name", "duration_ms"}

    def test_to_dict_nested(self) -> None:
        root = Span(name="root")
        child = Span(name="child", parent=root)
        root.children.append(child)
        child.annotate("model", "m")
        d = root.to_dict()
        assert d["children"][0]["annotations"] == {"model": "m"}


@traced
def _operation(*, fail: bool = False) -> ServiceResult:
    with trace_span("inner") as span:
        if span:
            span.annotate("k", 1)
    if fail:
        raise RuntimeError("boom")
    return ServiceResult(ok=True, op="operation")


class TestTraced:
    def test_disabled_leaves_meta_empty(self) -> None:
        assert _operation().meta is None

    def test_enabled_attaches_tree(self) -> None:
        enable_telemetry()
        result = _operation()
        telemetry = result.meta["telemetry"]  # type: ignore[index]
        assert telemetry["name"].endswith("_operation")
        assert telemetry["children"] == [
            {"name": "inner", "duration_ms": telemetry["children"][0]["duration_ms"], "annotations": {"k": 1}}
        ]

    def test_exception_propagates_and_resets(self) -> None:
        enable_telemetry()
        with pytest.raises(RuntimeError):
            _operation(fail=True)
        assert get_current_span() is None

    def test_trace_span_outside_traced_call(self) -> None:
        enable_telemetry()
        with trace_span("orphan") as span:
            assert span is None

    def test_preserves_existing_meta(self) -> None:
        @traced
        def op() -> ServiceResult:
            return ServiceResult(ok=True, op="x", meta={"count": 2})

        enable_telemetry()
        meta = op().meta
        assert meta is not None
        assert meta["count"] == 2
        assert "telemetry" in meta
