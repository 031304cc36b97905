"""Environment-driven tuning knobs for the analysis scheduler."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEBOUNCE_ENV = "RHYMES_DEBOUNCE_SECONDS"
FULL_RECOMPUTE_RATIO_ENV = "RHYMES_FULL_RECOMPUTE_RATIO"
SHRINK_RATIO_ENV = "RHYMES_SHRINK_RATIO"
CMUDICT_PATH_ENV = "RHYMES_CMUDICT_PATH"

DEFAULT_DEBOUNCE_SECONDS = 0.4
DEFAULT_FULL_RECOMPUTE_RATIO = 0.3
DEFAULT_SHRINK_RATIO = 0.7


def _read_float(
    environ: Mapping[str, str],
    name: str,
    default: float,
    *,
    minimum: float = 0.0,
    maximum: Optional[float] = None,
) -> float:
    raw = environ.get(name)
    if raw is None or not str(raw).strip():
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if value < minimum:
        return default
    if maximum is not None and value > maximum:
        return default
    return value


@dataclass(frozen=True)
class AnalysisSettings:
    """Scheduler configuration.

    ``full_recompute_ratio`` is the share of previously unseen words above
    which an edit triggers a full recompute; ``shrink_ratio`` is the fraction
    of the old token count below which the new text counts as a large
    deletion and is also recomputed from scratch.
    """

    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    full_recompute_ratio: float = DEFAULT_FULL_RECOMPUTE_RATIO
    shrink_ratio: float = DEFAULT_SHRINK_RATIO
    dictionary_path: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AnalysisSettings":
        env = os.environ if environ is None else environ
        return cls(
            debounce_seconds=_read_float(env, DEBOUNCE_ENV, DEFAULT_DEBOUNCE_SECONDS),
            full_recompute_ratio=_read_float(
                env, FULL_RECOMPUTE_RATIO_ENV, DEFAULT_FULL_RECOMPUTE_RATIO, maximum=1.0
            ),
            shrink_ratio=_read_float(env, SHRINK_RATIO_ENV, DEFAULT_SHRINK_RATIO, maximum=1.0),
            dictionary_path=(env.get(CMUDICT_PATH_ENV) or "").strip() or None,
        )


__all__ = [
    "AnalysisSettings",
    "CMUDICT_PATH_ENV",
    "DEBOUNCE_ENV",
    "FULL_RECOMPUTE_RATIO_ENV",
    "SHRINK_RATIO_ENV",
]
