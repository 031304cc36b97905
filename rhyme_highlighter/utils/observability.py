"""Structured logging plus optional metrics and tracing for analysis passes.

``prometheus_client`` and ``opentelemetry`` are both optional. They are probed
once at import; without them every metric handle and span helper below turns
into a no-op and the rhyme engine behaves exactly the same.
"""

from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional


try:  # pragma: no cover - optional dependency probing
    from prometheus_client import REGISTRY as _PROM_REGISTRY
    from prometheus_client import Counter as _PromCounter
    from prometheus_client import Histogram as _PromHistogram
except Exception:  # pragma: no cover - Prometheus not installed
    _PROM_REGISTRY = None
    _PromCounter = None
    _PromHistogram = None

try:  # pragma: no cover - optional dependency probing
    from opentelemetry import trace as _otel_trace
except Exception:  # pragma: no cover - OpenTelemetry not installed
    _otel_trace = None

TRACER_NAME = "rhyme_highlighter"


def _render_context(context: Mapping[str, Any]) -> str:
    try:
        return json.dumps(dict(context), sort_keys=True, default=str)
    except TypeError:
        # Mixed key types cannot be sorted.
        return json.dumps({str(key): str(value) for key, value in context.items()})


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that appends bound and per-call ``context`` as JSON.

    ``logger.info("Committed", context={"sequence": 3})`` renders as
    ``Committed | {"component": "...", "sequence": 3}``.
    """

    def bind(self, **context: Any) -> "StructuredLoggerAdapter":
        return StructuredLoggerAdapter(self.logger, {**self.extra, **context})

    def process(self, msg: str, kwargs: Dict[str, Any]):
        context: Dict[str, Any] = dict(self.extra)
        call_context = kwargs.pop("context", None)
        if isinstance(call_context, Mapping):
            context.update(call_context)
        if not context:
            return msg, kwargs
        return f"{msg} | {_render_context(context)}", kwargs


def get_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    return StructuredLoggerAdapter(logging.getLogger(name), context)


def _guarded(action: Callable[[], Any]) -> None:
    try:
        action()
    except Exception:  # pragma: no cover - metrics backend failure
        return


class _MetricHandle:
    def __init__(self, impl: Any = None) -> None:
        self._impl = impl

    @property
    def active(self) -> bool:
        return self._impl is not None

    def labels(self, **labels: Any):
        factory = getattr(self._impl, "labels", None)
        if factory is None:
            return type(self)()
        try:
            return type(self)(factory(**labels))
        except Exception:  # pragma: no cover - label mismatch
            return type(self)()


class CounterHandle(_MetricHandle):
    """Prometheus counter, or a sink when Prometheus is absent."""

    def inc(self, amount: float = 1.0) -> None:
        if self._impl is not None:
            _guarded(lambda: self._impl.inc(amount))


class HistogramHandle(_MetricHandle):
    """Prometheus histogram, or a sink when Prometheus is absent."""

    def observe(self, value: float) -> None:
        if self._impl is not None:
            _guarded(lambda: self._impl.observe(value))

    @contextmanager
    def time(self) -> Iterator[None]:
        started = time.perf_counter()
        try:
            yield
        finally:
            self.observe(time.perf_counter() - started)


def _existing_collector(name: str) -> Any:
    lookup = getattr(_PROM_REGISTRY, "_names_to_collectors", None)
    if not lookup:
        return None
    # Counters are registered under their name without the ``_total`` suffix.
    base = name[: -len("_total")] if name.endswith("_total") else name
    return lookup.get(name) or lookup.get(base)


def _register(factory: Any, name: str, documentation: str, label_names: Optional[Iterable[str]]) -> Any:
    if factory is None:
        return None
    try:
        return factory(name, documentation, labelnames=tuple(label_names or ()))
    except ValueError:
        # Already registered, typically by a second scheduler in the process.
        return _existing_collector(name)
    except Exception:  # pragma: no cover
        return None


def create_counter(
    name: str,
    documentation: str,
    label_names: Optional[Iterable[str]] = None,
) -> CounterHandle:
    return CounterHandle(_register(_PromCounter, name, documentation, label_names))


def create_histogram(
    name: str,
    documentation: str,
    label_names: Optional[Iterable[str]] = None,
) -> HistogramHandle:
    return HistogramHandle(_register(_PromHistogram, name, documentation, label_names))


@contextmanager
def start_span(name: str, attributes: Optional[Mapping[str, Any]] = None):
    """Open a span on the package tracer; yields ``None`` without OpenTelemetry."""

    if _otel_trace is None:
        yield None
        return

    tracer = _otel_trace.get_tracer(TRACER_NAME)
    with tracer.start_as_current_span(name) as span:  # type: ignore[attr-defined]
        add_span_attributes(span, attributes or {})
        yield span


def add_span_attributes(span: Any, attributes: Mapping[str, Any]) -> None:
    if span is None:
        return
    for key, value in attributes.items():
        if isinstance(key, str) and value is not None:
            _guarded(lambda: span.set_attribute(key, value))


def record_exception(span: Any, error: BaseException) -> None:
    """Mark ``span`` as failed with ``error`` attached."""

    if span is None:
        return
    _guarded(lambda: span.record_exception(error))
    _guarded(lambda: span.set_attribute("error", True))


__all__ = [
    "CounterHandle",
    "HistogramHandle",
    "StructuredLoggerAdapter",
    "TRACER_NAME",
    "add_span_attributes",
    "create_counter",
    "create_histogram",
    "get_logger",
    "record_exception",
    "start_span",
]
