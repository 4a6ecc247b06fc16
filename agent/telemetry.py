"""Per-session telemetry for the tool loop.

Every model call, tool run and loop iteration is appended to a JSONL file
named after the session. When OpenTelemetry is enabled and installed, model
calls and tool runs are mirrored as spans.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
import json
import os
import threading
import time
from typing import Any

from agent.config import TelemetryConfig


@dataclass
class ModelCall:
    model: str
    prompt_chars: int
    response_chars: int
    latency_ms: float
    error: str | None = None


@dataclass
class ToolRun:
    tool_name: str
    arguments: Any
    duration_ms: float
    success: bool
    result_summary: str
    error: str | None = None


@dataclass
class IterationRecord:
    """One pass of the loop; ``decision`` is ``final`` or ``tools:<names>``."""
    iteration: int
    decision: str
    duration_ms: float


@dataclass
class SessionSummary:
    session_id: str
    total_iterations: int
    iterations: list[IterationRecord]
    tool_calls: list[ToolRun]
    llm_calls: list[ModelCall]
    total_duration_ms: float
    final_response_chars: int


class _JsonlSink:
    """Append-only JSONL writer shared by every event of one session."""

    def __init__(self, path: str, session_id: str):
        self.path = path
        self.session_id = session_id
        self._lock = threading.Lock()

    def write(self, event: str, payload: dict[str, Any]) -> None:
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": self.session_id,
            "event": event,
            **payload,
        }
        line = json.dumps(record, default=str)
        with self._lock:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")


def _build_tracer(config: TelemetryConfig, sink: _JsonlSink):
    """Return an OpenTelemetry tracer, or None when the SDK is missing."""
    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
    except ImportError:
        sink.write("telemetry_warning", {"message": "OpenTelemetry SDK not installed; spans disabled."})
        return None

    provider = TracerProvider(
        resource=Resource.create({"service.name": config.otel_service_name})
    )
    if config.otel_endpoint:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=config.otel_endpoint))
        )
    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


class Telemetry:
    """Collect structured metrics for one ``Agent.handle_message`` run.

    All ``record_*`` calls are no-ops when telemetry is disabled.
    """

    def __init__(self, config: TelemetryConfig, session_id: str):
        self.config = config
        self.session_id = session_id
        self._started = time.monotonic()
        self._model_calls: list[ModelCall] = []
        self._tool_runs: list[ToolRun] = []
        self._iterations: list[IterationRecord] = []
        self._final_response_chars = 0
        self._sink: _JsonlSink | None = None
        self._tracer = None

        if config.enabled:
            os.makedirs(config.log_dir, exist_ok=True)
            self._sink = _JsonlSink(
                os.path.join(config.log_dir, f"{session_id}.jsonl"), session_id
            )
            if config.otel_enabled:
                self._tracer = _build_tracer(config, self._sink)

    def record_llm_call(
        self,
        model: str,
        prompt_chars: int,
        response_chars: int,
        latency_ms: float,
        error: str | None = None,
    ) -> None:
        self._record(
            "llm_call",
            self._model_calls,
            ModelCall(model, prompt_chars, response_chars, latency_ms, error),
        )

    def record_tool_call(
        self,
        tool_name: str,
        arguments: Any,
        duration_ms: float,
        success: bool,
        result_summary: str,
        error: str | None = None,
    ) -> None:
        # Span attributes must be scalars.
        self._record(
            "tool_call",
            self._tool_runs,
            ToolRun(tool_name, arguments, duration_ms, success, result_summary, error),
            span_overrides={"arguments": json.dumps(arguments, default=str)},
        )

    def record_iteration(self, iteration: int, decision: str, duration_ms: float) -> None:
        self._record(
            "loop_iteration",
            self._iterations,
            IterationRecord(iteration, decision, duration_ms),
            span=False,
        )

    def finalize(self, final_response: str) -> None:
        """Store the answer length and write the ``session_summary`` event."""
        if self._sink is None:
            return
        self._final_response_chars = len(final_response)
        self._sink.write("session_summary", asdict(self.summary()))

    def summary(self) -> SessionSummary:
        return SessionSummary(
            session_id=self.session_id,
            total_iterations=len(self._iterations),
            iterations=list(self._iterations),
            tool_calls=list(self._tool_runs),
            llm_calls=list(self._model_calls),
            total_duration_ms=(time.monotonic() - self._started) * 1000,
            final_response_chars=self._final_response_chars,
        )

    def _record(
        self,
        event: str,
        bucket: list,
        metric: Any,
        span_overrides: dict[str, Any] | None = None,
        span: bool = True,
    ) -> None:
        if self._sink is None:
            return
        bucket.append(metric)
        payload = asdict(metric)
        self._sink.write(event, payload)
        if span and self._tracer is not None:
            attributes = {**payload, **(span_overrides or {})}
            with self._tracer.start_as_current_span(event) as current:
                for key, value in attributes.items():
                    if value is not None:
                        current.set_attribute(key, value)
