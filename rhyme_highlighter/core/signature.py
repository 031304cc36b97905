"""Rhyme signature extraction from ARPABET phoneme sequences."""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, TYPE_CHECKING

from .models import PhoneticSignature

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .pronunciation_store import PronunciationStore

STRESS_DIGITS = frozenset("012")
PRIMARY_STRESS = "1"


def has_stress_digit(phoneme: str) -> bool:
    return bool(phoneme) and phoneme[-1] in STRESS_DIGITS


def base_vowel(phoneme: str) -> str:
    """Strip a trailing stress digit: ``AY1`` -> ``AY``."""

    if has_stress_digit(phoneme):
        return phoneme[:-1]
    return phoneme


def _last_stress_index(phonemes: Sequence[str]) -> Optional[int]:
    for index in range(len(phonemes) - 1, -1, -1):
        if has_stress_digit(phonemes[index]):
            return index
    return None


def extract_signature(phonemes: Sequence[str]) -> Optional[PhoneticSignature]:
    """Return the signature anchored on the last stress-marked phoneme.

    Earlier stress marks (secondary stress in long words) are ignored. Returns
    ``None`` when no phoneme carries a stress digit.
    """

    index = _last_stress_index(phonemes)
    if index is None:
        return None
    return PhoneticSignature(
        stressed_vowel=phonemes[index],
        coda=tuple(phonemes[index + 1 :]),
    )


def rhyme_tail(phonemes: Sequence[str]) -> str:
    index = _last_stress_index(phonemes)
    if index is None:
        return "N/A"
    return "-".join(phonemes[index:])


def describe_phonemes(word: str, store: "PronunciationStore") -> Dict[str, Any]:
    """Phonetic breakdown of ``word`` for diagnostics views."""

    phonemes = store.lookup(word) or ()
    signature = extract_signature(phonemes) if phonemes else None
    return {
        "word": word,
        "phonemes": tuple(phonemes),
        "found": bool(phonemes),
        "rhyme_tail": rhyme_tail(phonemes) if phonemes else "N/A",
        "signature": signature,
    }


__all__ = [
    "PRIMARY_STRESS",
    "STRESS_DIGITS",
    "base_vowel",
    "describe_phonemes",
    "extract_signature",
    "has_stress_digit",
    "rhyme_tail",
]
