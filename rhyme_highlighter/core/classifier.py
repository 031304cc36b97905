from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional, Sequence, Tuple

from .models import PhoneticSignature, RhymeStrength
from .signature import base_vowel


# Vowel families that commonly pass for each other in slant rhymes.
SIMILAR_VOWEL_SETS: Tuple[FrozenSet[str], ...] = (
    frozenset({"AY", "EY"}),        # night / day
    frozenset({"OW", "AW", "AO"}),  # show / saw
    frozenset({"IY", "IH"}),        # see / sit
    frozenset({"UW", "UH"}),        # too / put
    frozenset({"AE", "EH"}),        # cat / bet
    frozenset({"ER", "AH"}),        # her / but
    frozenset({"OY", "OW"}),        # boy / show
    frozenset({"AY", "IH"}),        # night / sit
)

_CODA_MATCH_THRESHOLD = 0.5


@dataclass(frozen=True)
class RhymeComparison:
    """Outcome of comparing two signatures."""

    strength: Optional[RhymeStrength]
    coda_similar: bool

    @property
    def rhymes(self) -> bool:
        return self.strength is not None


def vowels_similar(vowel_a: str, vowel_b: str) -> bool:
    base_a = base_vowel(vowel_a)
    base_b = base_vowel(vowel_b)
    if base_a == base_b:
        return True
    return any(base_a in family and base_b in family for family in SIMILAR_VOWEL_SETS)


def codas_similar(coda_a: Sequence[str], coda_b: Sequence[str]) -> bool:
    coda_a = tuple(coda_a)
    coda_b = tuple(coda_b)
    if coda_a == coda_b:
        return True
    if not coda_a or not coda_b:
        return False
    if len(coda_a) == len(coda_b):
        matching = sum(1 for left, right in zip(coda_a, coda_b) if left == right)
        return matching / len(coda_a) >= _CODA_MATCH_THRESHOLD
    return coda_a[-1] == coda_b[-1]


def compare_signatures(a: PhoneticSignature, b: PhoneticSignature) -> RhymeComparison:
    coda_similar = codas_similar(a.coda, b.coda)
    if a.stressed_vowel == b.stressed_vowel:
        strength = RhymeStrength.PERFECT if a.coda == b.coda else RhymeStrength.NEAR
        return RhymeComparison(strength, coda_similar)
    if vowels_similar(a.stressed_vowel, b.stressed_vowel):
        # Coda similarity is reported but does not decide slant membership.
        return RhymeComparison(RhymeStrength.SLANT, coda_similar)
    return RhymeComparison(None, coda_similar)


def rhyme_score(a: PhoneticSignature, b: PhoneticSignature) -> Optional[RhymeStrength]:
    """Classify a pair as perfect, near, slant or ``None``; symmetric."""

    return compare_signatures(a, b).strength


__all__ = [
    "RhymeComparison",
    "SIMILAR_VOWEL_SETS",
    "codas_similar",
    "compare_signatures",
    "rhyme_score",
    "vowels_similar",
]
