"""Dataclasses shared by the rhyme grouping pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple

# Background colors for rhyme groups as RGB floats. Only the palette size
# matters to the engine; renderers pick the actual color by ``color_index``.
RHYME_COLOR_PALETTE: Tuple[Tuple[float, float, float], ...] = (
    (0.94, 0.76, 0.20),
    (0.94, 0.45, 0.35),
    (0.48, 0.78, 0.64),
    (0.45, 0.64, 0.90),
    (0.72, 0.56, 0.90),
    (0.90, 0.62, 0.78),
)


class RhymeStrength(Enum):
    PERFECT = 1.0
    NEAR = 0.75
    SLANT = 0.55

    @property
    def label(self) -> str:
        return self.name.lower()


class RhymeType(Enum):
    """Where a rhyme sits relative to the line structure."""

    END = "end"
    INTERNAL = "internal"
    SLANT = "slant"


@dataclass(frozen=True)
class PhoneticSignature:
    """Stressed vowel (stress digit included) plus the phonemes after it."""

    stressed_vowel: str
    coda: Tuple[str, ...] = ()


@dataclass(frozen=True)
class WordOccurrence:
    """One token of the analysed text; only meaningful within a single pass."""

    word: str
    start: int
    end: int
    line_index: int = 0
    position_in_line: int = 0
    is_line_end: bool = False
    index: int = 0

    @property
    def span(self) -> Tuple[int, int]:
        return (self.start, self.end)


@dataclass(frozen=True)
class RhymeGroup:
    key: str
    strength: RhymeStrength
    color_index: int
    members: Tuple[WordOccurrence, ...]
    rhyme_type: RhymeType = RhymeType.INTERNAL

    @property
    def words(self) -> Tuple[str, ...]:
        return tuple(member.word for member in self.members)

    @property
    def first_offset(self) -> int:
        return min((member.start for member in self.members), default=0)

    def unique_words(self) -> Tuple[str, ...]:
        """Sorted distinct words, as listed in the rhyme map."""

        return tuple(sorted({member.word for member in self.members}))


@dataclass(frozen=True)
class Highlight:
    start: int
    end: int
    word: str
    color_index: int
    strength: RhymeStrength
    rhyme_type: RhymeType
    group_key: str

    @property
    def span(self) -> Tuple[int, int]:
        return (self.start, self.end)


def _freeze(signatures: Mapping[str, PhoneticSignature]) -> Mapping[str, PhoneticSignature]:
    return MappingProxyType(dict(signatures))


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Everything consumers see after one committed analysis pass.

    Snapshots are replaced as a whole; nothing inside is mutated after
    construction.
    """

    text: str = ""
    fingerprint: int = 0
    sequence: int = 0
    signatures: Mapping[str, PhoneticSignature] = field(
        default_factory=lambda: MappingProxyType({})
    )
    groups: Tuple[RhymeGroup, ...] = ()
    highlights: Tuple[Highlight, ...] = ()
    mode: str = "empty"

    @classmethod
    def build(
        cls,
        *,
        text: str,
        fingerprint: int,
        sequence: int,
        signatures: Mapping[str, PhoneticSignature],
        groups,
        highlights,
        mode: str,
    ) -> "AnalysisSnapshot":
        ordered_groups = tuple(
            sorted(groups, key=lambda group: (group.first_offset, group.key))
        )
        return cls(
            text=text,
            fingerprint=fingerprint,
            sequence=sequence,
            signatures=_freeze(signatures),
            groups=ordered_groups,
            highlights=tuple(highlights),
            mode=mode,
        )


__all__ = [
    "AnalysisSnapshot",
    "Highlight",
    "PhoneticSignature",
    "RHYME_COLOR_PALETTE",
    "RhymeGroup",
    "RhymeStrength",
    "RhymeType",
    "WordOccurrence",
]
