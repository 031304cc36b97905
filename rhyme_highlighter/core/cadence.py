"""Syllable, stress and per-line cadence metrics."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import Highlight
from .pronunciation_store import PronunciationStore, default_store
from .signature import PRIMARY_STRESS, has_stress_digit

_LETTER_RUN = re.compile(r"[^\W\d_]+")


@dataclass(frozen=True)
class SyllableProfile:
    syllables: int
    stresses: Tuple[int, ...]


class SyllableStressAnalyzer:
    """Counts syllables as stress-marked phonemes and notes primary stresses."""

    def __init__(self, store: Optional[PronunciationStore] = None) -> None:
        self.store = store if store is not None else default_store()

    def analyze(self, word: str) -> SyllableProfile:
        phonemes = self.store.lookup(word)
        if not phonemes:
            return SyllableProfile(0, ())

        syllable_index = 0
        stresses: List[int] = []
        for phoneme in phonemes:
            if not has_stress_digit(phoneme):
                continue
            if phoneme[-1] == PRIMARY_STRESS:
                stresses.append(syllable_index)
            syllable_index += 1
        return SyllableProfile(syllable_index, tuple(stresses))


@dataclass(frozen=True)
class LineMetrics:
    line_index: int
    syllable_count: int
    stress_count: int
    rhyme_count: int


@dataclass(frozen=True)
class CadenceMetrics:
    lines: Tuple[LineMetrics, ...] = ()

    @property
    def average_syllables(self) -> float:
        if not self.lines:
            return 0.0
        return sum(line.syllable_count for line in self.lines) / len(self.lines)

    @property
    def syllable_variance(self) -> float:
        """Population variance of syllables per line."""

        if not self.lines:
            return 0.0
        mean = self.average_syllables
        return sum((line.syllable_count - mean) ** 2 for line in self.lines) / len(self.lines)


class CadenceAnalyzer:
    """Per-line syllable and stress totals as a coarse meter signal."""

    def __init__(
        self,
        store: Optional[PronunciationStore] = None,
        *,
        syllable_analyzer: Optional[SyllableStressAnalyzer] = None,
    ) -> None:
        self.syllable_analyzer = syllable_analyzer or SyllableStressAnalyzer(store)

    def analyze(self, text: str, highlights: Iterable[Highlight] = ()) -> CadenceMetrics:
        highlight_starts: Sequence[int] = sorted(highlight.start for highlight in highlights)

        results: List[LineMetrics] = []
        offset = 0
        for index, line in enumerate((text or "").split("\n")):
            line_start, line_end = offset, offset + len(line)
            offset = line_end + 1

            syllables = 0
            stresses = 0
            for match in _LETTER_RUN.finditer(line):
                profile = self.syllable_analyzer.analyze(match.group(0).lower())
                syllables += profile.syllables
                stresses += len(profile.stresses)

            rhyme_count = sum(1 for start in highlight_starts if line_start <= start < line_end)
            results.append(LineMetrics(index, syllables, stresses, rhyme_count))

        return CadenceMetrics(tuple(results))


__all__ = [
    "CadenceAnalyzer",
    "CadenceMetrics",
    "LineMetrics",
    "SyllableProfile",
    "SyllableStressAnalyzer",
]
