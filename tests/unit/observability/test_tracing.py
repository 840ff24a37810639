"""Tests for OpenTelemetry tracing."""

import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.trace import StatusCode

from origination.observability.tracing import (
    create_span,
    get_current_span_id,
    get_current_trace_id,
    get_tracer,
    setup_tracing,
)


@pytest.fixture(autouse=True)
def reset_tracing():
    """Install a fresh SDK provider so spans carry valid ids."""
    trace.set_tracer_provider(TracerProvider())
    yield


class TestSetupTracing:
    """Tests for tracing setup."""

    def test_setup_tracing_returns_tracer(self):
        tracer = setup_tracing(service_name="origination-test")
        assert tracer is not None
        assert get_tracer() is tracer


class TestCurrentIds:
    """Tests for trace and span id helpers."""

    def test_no_ids_outside_a_span(self):
        assert get_current_trace_id() is None
        assert get_current_span_id() is None

    def test_ids_inside_a_span(self):
        with create_span("kyc.curp"):
            trace_id = get_current_trace_id()
            span_id = get_current_span_id()

        assert trace_id is not None and len(trace_id) == 32
        assert span_id is not None and len(span_id) == 16


class TestCreateSpan:
    """Tests for create_span."""

    def test_exception_marks_span_as_error(self):
        with pytest.raises(ValueError):
            with create_span("kyc.ine") as span:
                raise ValueError("timeout")

        assert span.status.status_code == StatusCode.ERROR
