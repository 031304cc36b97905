"""Utility helpers shared across the :mod:`rhyme_highlighter` package."""

from __future__ import annotations

from .hashing import HASH_VERSION, fnv1a_32, fnv1a_64, text_fingerprint
from .logging_config import configure_logging
from .observability import (
    StructuredLoggerAdapter,
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)
from .settings import AnalysisSettings
from .telemetry import StructuredTelemetry, TelemetryLogger

__all__ = [
    "AnalysisSettings",
    "HASH_VERSION",
    "StructuredLoggerAdapter",
    "StructuredTelemetry",
    "TelemetryLogger",
    "add_span_attributes",
    "configure_logging",
    "create_counter",
    "create_histogram",
    "fnv1a_32",
    "fnv1a_64",
    "get_logger",
    "record_exception",
    "start_span",
    "text_fingerprint",
]
