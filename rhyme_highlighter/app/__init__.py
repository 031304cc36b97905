"""Scheduling and wiring for interactive rhyme analysis."""

from .app import RhymeHighlighterApp
from .scheduler import MODE_FULL, MODE_INCREMENTAL, AnalysisScheduler, UpdatePlan

__all__ = [
    "AnalysisScheduler",
    "MODE_FULL",
    "MODE_INCREMENTAL",
    "RhymeHighlighterApp",
    "UpdatePlan",
]
