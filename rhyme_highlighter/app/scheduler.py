"""Debounced, incremental rhyme analysis for an interactive editor.

Every accepted edit receives a monotonically increasing sequence number.
Computations run on a worker pool and commit their snapshot only if their
sequence is still the latest one issued when they finish, so results apply in
request order no matter which worker finishes first.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Optional, Set

from rhyme_highlighter.core.cadence import CadenceAnalyzer, CadenceMetrics
from rhyme_highlighter.core.grouping import GroupingEngine
from rhyme_highlighter.core.highlights import HighlightProjector
from rhyme_highlighter.core.models import AnalysisSnapshot
from rhyme_highlighter.core.pronunciation_store import PronunciationStore, default_store
from rhyme_highlighter.core.tokenizer import token_words, tokenize
from rhyme_highlighter.exceptions import SchedulerClosedError
from rhyme_highlighter.utils.hashing import text_fingerprint
from rhyme_highlighter.utils.observability import (
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)
from rhyme_highlighter.utils.settings import AnalysisSettings
from rhyme_highlighter.utils.telemetry import StructuredTelemetry

MODE_FULL = "full"
MODE_INCREMENTAL = "incremental"

TimerFactory = Callable[..., Any]


@dataclass(frozen=True)
class UpdatePlan:
    mode: str
    new_words: FrozenSet[str]
    change_ratio: float


@dataclass(frozen=True)
class _Request:
    sequence: int
    fingerprint: int
    text: str


class AnalysisScheduler:
    """Single owner of the committed analysis snapshot for one document."""

    def __init__(
        self,
        engine: Optional[GroupingEngine] = None,
        projector: Optional[HighlightProjector] = None,
        *,
        store: Optional[PronunciationStore] = None,
        settings: Optional[AnalysisSettings] = None,
        executor: Optional[Any] = None,
        timer_factory: TimerFactory = threading.Timer,
        telemetry: Optional[StructuredTelemetry] = None,
    ) -> None:
        self.settings = settings or AnalysisSettings.from_env()
        if engine is None:
            if store is None:
                store = (
                    PronunciationStore(self.settings.dictionary_path)
                    if self.settings.dictionary_path
                    else default_store()
                )
            engine = GroupingEngine(store)
        self.engine = engine
        self.projector = projector or HighlightProjector()
        self.telemetry = telemetry or StructuredTelemetry()

        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="rhyme-analysis"
        )
        self._timer_factory = timer_factory

        self._lock = threading.RLock()
        self._snapshot = AnalysisSnapshot()
        self._latest_sequence = 0
        self._latest_fingerprint: Optional[int] = None
        self._has_requested = False
        self._pending: Optional[_Request] = None
        self._timer: Any = None
        self._inflight: Set[Future] = set()
        self._closed = False
        self._stats: Dict[str, int] = {
            "requests": 0,
            "computations": 0,
            "full_recomputes": 0,
            "incremental_updates": 0,
            "stale_discards": 0,
            "failures": 0,
        }

        self._logger = get_logger(__name__).bind(component="analysis_scheduler")
        self._metric_runs = create_counter(
            "rhyme_analysis_runs_total",
            "Rhyme analysis computations started, by mode.",
            label_names=("mode",),
        )
        self._metric_stale = create_counter(
            "rhyme_analysis_stale_discards_total",
            "Completed rhyme analyses dropped because a newer edit arrived.",
        )
        self._metric_failures = create_counter(
            "rhyme_analysis_failures_total",
            "Rhyme analyses that raised an exception.",
        )
        self._metric_duration = create_histogram(
            "rhyme_analysis_seconds",
            "Duration of rhyme analysis computations.",
        )

        self._logger.info(
            "Analysis scheduler initialised",
            context={
                "debounce_seconds": self.settings.debounce_seconds,
                "full_recompute_ratio": self.settings.full_recompute_ratio,
                "shrink_ratio": self.settings.shrink_ratio,
            },
        )

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------
    def update_if_needed(self, text: str) -> bool:
        """Request analysis of ``text``; returns ``False`` if nothing changed."""

        text = text or ""
        fingerprint = text_fingerprint(text)
        with self._lock:
            if self._closed:
                raise SchedulerClosedError("analysis scheduler is closed")
            if fingerprint == self._latest_fingerprint:
                return False

            self._latest_sequence += 1
            self._latest_fingerprint = fingerprint
            self._stats["requests"] += 1
            request = _Request(self._latest_sequence, fingerprint, text)

            self._cancel_timer_locked()
            if not self._has_requested or self.settings.debounce_seconds <= 0:
                self._has_requested = True
                self._submit_locked(request)
            else:
                self._pending = request
                timer = self._timer_factory(
                    self.settings.debounce_seconds,
                    self._fire_pending,
                    args=(request.sequence,),
                )
                timer.daemon = True
                self._timer = timer
                timer.start()
        return True

    def snapshot(self) -> AnalysisSnapshot:
        with self._lock:
            return self._snapshot

    @property
    def groups(self):
        return self.snapshot().groups

    @property
    def highlights(self):
        return self.snapshot().highlights

    @property
    def stats(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._stats)

    @property
    def has_pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def cadence(self, analyzer: Optional[CadenceAnalyzer] = None) -> CadenceMetrics:
        """Cadence metrics for the committed snapshot."""

        current = self.snapshot()
        analyzer = analyzer or CadenceAnalyzer(self.engine.store)
        return analyzer.analyze(current.text, current.highlights)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Start any debounced request now and wait for running work."""

        with self._lock:
            request = self._pending
            if request is not None and not self._closed:
                self._cancel_timer_locked()
                self._submit_locked(request)
        return self.wait_idle(timeout)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        with self._lock:
            futures = set(self._inflight)
        if not futures:
            return True
        _, not_done = wait(futures, timeout=timeout)
        return not not_done

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._cancel_timer_locked()
        if self._owns_executor:
            self._executor.shutdown(wait=True)
        self._logger.info("Analysis scheduler closed", context=self.stats)

    def __enter__(self) -> "AnalysisScheduler":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Planning and computation
    # ------------------------------------------------------------------
    def plan_update(self, old_text: str, new_text: str) -> UpdatePlan:
        """Decide between an incremental pass and a full recompute."""

        new_tokens = token_words(new_text)
        if not old_text:
            return UpdatePlan(MODE_FULL, frozenset(new_tokens), 1.0 if new_tokens else 0.0)

        old_tokens = token_words(old_text)
        old_words = set(old_tokens)
        unseen = [word for word in new_tokens if word not in old_words]
        change_ratio = len(unseen) / max(len(new_tokens), 1)
        shrank = len(new_tokens) < len(old_tokens) * self.settings.shrink_ratio

        if change_ratio > self.settings.full_recompute_ratio or shrank:
            mode = MODE_FULL
        else:
            mode = MODE_INCREMENTAL
        return UpdatePlan(mode, frozenset(unseen), change_ratio)

    def compute_snapshot(
        self,
        text: str,
        base: Optional[AnalysisSnapshot] = None,
        *,
        sequence: int = 0,
        fingerprint: Optional[int] = None,
    ) -> AnalysisSnapshot:
        """Build the snapshot for ``text`` relative to the committed ``base``."""

        base = base or AnalysisSnapshot()
        plan = self.plan_update(base.text, text)
        occurrences = tokenize(text)

        if plan.mode == MODE_FULL:
            signatures = self.engine.resolve_signatures(
                occurrence.word for occurrence in occurrences
            )
        else:
            signatures = dict(base.signatures)
            signatures.update(self.engine.resolve_signatures(sorted(plan.new_words)))

        groups = self.engine.group_occurrences(occurrences, signatures)
        highlights = self.projector.compute_all(groups)
        return AnalysisSnapshot.build(
            text=text,
            fingerprint=text_fingerprint(text) if fingerprint is None else fingerprint,
            sequence=sequence,
            signatures=signatures,
            groups=groups,
            highlights=highlights,
            mode=plan.mode,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _cancel_timer_locked(self) -> None:
        timer = self._timer
        self._timer = None
        self._pending = None
        if timer is not None:
            timer.cancel()

    def _fire_pending(self, sequence: int) -> None:
        with self._lock:
            request = self._pending
            if self._closed or request is None or request.sequence != sequence:
                return
            self._pending = None
            self._timer = None
            self._submit_locked(request)

    def _submit_locked(self, request: _Request) -> None:
        future = self._executor.submit(self._run, request)
        self._inflight.add(future)
        future.add_done_callback(self._forget)

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._inflight.discard(future)

    def _is_current(self, request: _Request) -> bool:
        with self._lock:
            return request.sequence == self._latest_sequence

    def _discard_stale(self, request: _Request, stage: str) -> None:
        with self._lock:
            self._stats["stale_discards"] += 1
            latest = self._latest_sequence
        self._metric_stale.inc()
        self._logger.debug(
            "Discarding stale rhyme analysis",
            context={"sequence": request.sequence, "latest": latest, "stage": stage},
        )

    def _run(self, request: _Request) -> Optional[AnalysisSnapshot]:
        if not self._is_current(request):
            self._discard_stale(request, "before_compute")
            return None

        with self._lock:
            base = self._snapshot
            self._stats["computations"] += 1

        telemetry = self.telemetry
        telemetry.start_trace("rhyme_analysis", sequence=request.sequence)
        with start_span(
            "rhyme_analysis.compute",
            {"rhyme.sequence": request.sequence, "rhyme.text_length": len(request.text)},
        ) as span:
            try:
                with self._metric_duration.time(), telemetry.timer("analysis.compute") as timing:
                    snapshot = self.compute_snapshot(
                        request.text,
                        base,
                        sequence=request.sequence,
                        fingerprint=request.fingerprint,
                    )
                    timing["mode"] = snapshot.mode
            except Exception as exc:
                with self._lock:
                    self._stats["failures"] += 1
                    # Nothing was committed, so the same text must be accepted again.
                    if request.sequence == self._latest_sequence:
                        self._latest_fingerprint = None
                self._metric_failures.inc()
                record_exception(span, exc)
                telemetry.increment("analysis.failed")
                self._logger.exception(
                    "Rhyme analysis failed",
                    context={"sequence": request.sequence},
                )
                raise

            add_span_attributes(
                span,
                {"rhyme.mode": snapshot.mode, "rhyme.groups": len(snapshot.groups)},
            )

        self._metric_runs.labels(mode=snapshot.mode).inc()
        telemetry.increment(f"analysis.{snapshot.mode}")
        telemetry.annotate("analysis.groups", len(snapshot.groups))
        telemetry.annotate("analysis.highlights", len(snapshot.highlights))

        if not self._commit(request, snapshot):
            return None
        return snapshot

    def _commit(self, request: _Request, snapshot: AnalysisSnapshot) -> bool:
        with self._lock:
            if request.sequence != self._latest_sequence:
                committed = False
            else:
                self._snapshot = snapshot
                key = "full_recomputes" if snapshot.mode == MODE_FULL else "incremental_updates"
                self._stats[key] += 1
                committed = True

        if not committed:
            self._discard_stale(request, "commit")
            return False

        self._logger.debug(
            "Committed rhyme analysis",
            context={
                "sequence": request.sequence,
                "mode": snapshot.mode,
                "groups": len(snapshot.groups),
                "highlights": len(snapshot.highlights),
            },
        )
        return True


__all__ = ["AnalysisScheduler", "MODE_FULL", "MODE_INCREMENTAL", "UpdatePlan"]
