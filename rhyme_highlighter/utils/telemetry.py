"""Per-pass telemetry for the analysis scheduler.

Each scheduled computation opens a trace. Timings, counters and annotations
recorded while it runs stay available until the next trace begins, so a
diagnostics view can always show the most recent pass.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, Iterable, Iterator, List, Optional

from .observability import get_logger

TelemetryListener = Callable[[str, Dict[str, Any]], None]


@dataclass
class _TimingStats:
    count: int = 0
    total: float = 0.0
    min: float = float("inf")
    max: float = 0.0

    def add(self, duration: float) -> None:
        self.count += 1
        self.total += duration
        self.min = min(self.min, duration)
        self.max = max(self.max, duration)

    def as_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "total": self.total,
            "min": self.min,
            "max": self.max,
            "avg": self.total / self.count if self.count else 0.0,
        }


@dataclass
class _Trace:
    trace_id: int = 0
    name: Optional[str] = None
    timings: Dict[str, _TimingStats] = field(default_factory=dict)
    counters: Dict[str, float] = field(default_factory=dict)
    events: Deque[Dict[str, Any]] = field(default_factory=deque)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "trace_id": self.trace_id,
            "name": self.name,
            "timings": {key: stats.as_dict() for key, stats in self.timings.items()},
            "counters": dict(self.counters),
            "events": [dict(event) for event in self.events],
            "metadata": dict(self.metadata),
        }


class StructuredTelemetry:
    """Thread-safe collector for the timings and counters of one trace."""

    def __init__(
        self,
        time_fn: Optional[Callable[[], float]] = None,
        *,
        max_events: int = 128,
        listeners: Optional[Iterable[TelemetryListener]] = None,
    ) -> None:
        self._clock = time_fn or time.perf_counter
        self._max_events = max(1, int(max_events))
        self._lock = threading.RLock()
        self._trace = _Trace(events=deque(maxlen=self._max_events))
        self._published: Dict[str, Any] = self._trace.as_dict()
        self._listeners: List[TelemetryListener] = list(listeners or [])

    def now(self) -> float:
        return float(self._clock())

    def _publish_locked(self) -> None:
        self._published = deepcopy(self._trace.as_dict())

    def _emit(self, event_type: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event_type, dict(payload))
            except Exception:
                # Listener failures never reach the analysis pass.
                continue

    def start_trace(self, name: str, **metadata: Any) -> int:
        """Drop the previous trace and open a new one called ``name``."""

        with self._lock:
            trace_id = self._trace.trace_id + 1
            self._trace = _Trace(
                trace_id=trace_id,
                name=name,
                events=deque(maxlen=self._max_events),
                metadata={**metadata, "start_time": self.now()},
            )
            self._publish_locked()

        self._emit("trace_started", {"trace_id": trace_id, "name": name})
        return trace_id

    def record_timing(
        self,
        name: str,
        duration: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        duration = max(0.0, float(duration))
        details = dict(metadata or {})
        event: Dict[str, Any] = {"name": name, "duration": duration}
        if details:
            event["metadata"] = details

        with self._lock:
            self._trace.timings.setdefault(name, _TimingStats()).add(duration)
            self._trace.events.append(event)
            self._publish_locked()

        self._emit("timing", {"name": name, "duration": duration, "metadata": details})

    @contextmanager
    def timer(
        self,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Iterator[Dict[str, Any]]:
        """Time the block; keys added to the yielded dict land in the event."""

        details: Dict[str, Any] = dict(metadata or {})
        started = self.now()
        try:
            yield details
        finally:
            self.record_timing(name, self.now() - started, details)

    def increment(self, name: str, amount: float = 1.0) -> None:
        delta = float(amount)
        with self._lock:
            value = self._trace.counters.get(name, 0.0) + delta
            self._trace.counters[name] = value
            self._publish_locked()

        self._emit("counter", {"name": name, "delta": delta, "value": value})

    def annotate(self, key: str, value: Any) -> None:
        with self._lock:
            self._trace.metadata[key] = value
            self._publish_locked()

        self._emit("metadata", {"key": key, "value": value})

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self._trace.as_dict()

    def latest_snapshot(self) -> Dict[str, Any]:
        """Copy of the state as last published, safe to keep across traces."""

        with self._lock:
            return deepcopy(self._published)

    def add_listener(self, listener: TelemetryListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: TelemetryListener) -> None:
        with self._lock:
            self._listeners = [entry for entry in self._listeners if entry is not listener]


class TelemetryLogger:
    """Listener that turns telemetry events into structured log records."""

    def __init__(
        self,
        *,
        logger: Optional[logging.LoggerAdapter] = None,
        level: int = logging.DEBUG,
        level_map: Optional[Dict[str, int]] = None,
    ) -> None:
        self._logger = logger or get_logger(__name__).bind(component="telemetry")
        self._level = level
        self._level_map = dict(level_map or {})

    def __call__(self, event_type: str, payload: Dict[str, Any]) -> None:
        level = self._level_map.get(event_type, self._level)
        if not self._logger.isEnabledFor(level):
            return

        label = payload.get("name") or payload.get("key") or payload.get("trace_id") or "event"
        context = {"telemetry.event": event_type, **{str(k): v for k, v in payload.items()}}
        try:
            self._logger.log(level, f"Telemetry {event_type}: {label}", context=context)
        except Exception:
            return


__all__ = ["StructuredTelemetry", "TelemetryListener", "TelemetryLogger"]
