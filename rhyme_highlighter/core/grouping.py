"""Rhyme grouping over a document's words.

The pipeline runs in two passes. Words sharing the exact stressed vowel
(stress digit included) are bucketed into perfect or near groups; the words
left over are then paired through the slant vowel table, anchored in document
order so overlapping slant relations always resolve the same way.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from rhyme_highlighter.utils.hashing import fnv1a_32
from rhyme_highlighter.utils.observability import get_logger

from .classifier import rhyme_score
from .models import (
    RHYME_COLOR_PALETTE,
    PhoneticSignature,
    RhymeGroup,
    RhymeStrength,
    RhymeType,
    WordOccurrence,
)
from .pronunciation_store import PronunciationStore, default_store
from .signature import base_vowel, extract_signature
from .tokenizer import tokenize

SLANT_KEY_SUFFIX = "_slant"

_Entry = Tuple[WordOccurrence, PhoneticSignature]


class GroupingEngine:
    """Turns text into rhyme groups using an injected pronunciation store."""

    def __init__(
        self,
        store: Optional[PronunciationStore] = None,
        *,
        palette_size: int = len(RHYME_COLOR_PALETTE),
    ) -> None:
        if palette_size < 1:
            raise ValueError("palette_size must be positive")
        self.store = store if store is not None else default_store()
        self.palette_size = palette_size
        self._logger = get_logger(__name__).bind(component="grouping_engine")

    # ------------------------------------------------------------------
    # Signatures
    # ------------------------------------------------------------------
    def resolve_signature(self, word: str) -> Optional[PhoneticSignature]:
        phonemes = self.store.lookup(word)
        if not phonemes:
            return None
        return extract_signature(phonemes)

    def resolve_signatures(self, words: Iterable[str]) -> Dict[str, PhoneticSignature]:
        """Signatures for every distinct word that has one; others are skipped."""

        resolved: Dict[str, PhoneticSignature] = {}
        for word in words:
            if word in resolved:
                continue
            signature = self.resolve_signature(word)
            if signature is not None:
                resolved[word] = signature
        return resolved

    def color_index(self, key: str) -> int:
        return fnv1a_32(key) % self.palette_size

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------
    def compute_groups(
        self,
        text: str,
        signatures: Optional[Mapping[str, PhoneticSignature]] = None,
    ) -> List[RhymeGroup]:
        """Group the words of ``text`` by rhyme.

        With ``signatures`` given, only that mapping is consulted and the
        store is never touched; words missing from it are treated as unknown.
        """

        occurrences = tokenize(text)
        if signatures is None:
            signatures = self.resolve_signatures(occurrence.word for occurrence in occurrences)
        return self.group_occurrences(occurrences, signatures)

    def group_occurrences(
        self,
        occurrences: Sequence[WordOccurrence],
        signatures: Mapping[str, PhoneticSignature],
    ) -> List[RhymeGroup]:
        entries: List[_Entry] = [
            (occurrence, signatures[occurrence.word])
            for occurrence in occurrences
            if occurrence.word in signatures
        ]

        buckets: Dict[str, List[_Entry]] = {}
        for entry in entries:
            buckets.setdefault(entry[1].stressed_vowel, []).append(entry)

        groups: List[RhymeGroup] = []
        processed: Set[int] = set()

        for key, bucket in buckets.items():
            if len(bucket) < 2:
                continue
            first_coda = bucket[0][1].coda
            strength = (
                RhymeStrength.PERFECT
                if all(signature.coda == first_coda for _, signature in bucket)
                else RhymeStrength.NEAR
            )
            members = tuple(occurrence for occurrence, _ in bucket)
            groups.append(
                RhymeGroup(
                    key=key,
                    strength=strength,
                    color_index=self.color_index(key),
                    members=members,
                    rhyme_type=_line_rhyme_type(members),
                )
            )
            processed.update(occurrence.index for occurrence in members)

        groups.extend(self._slant_groups(entries, processed))

        self._logger.debug(
            "Rhyme groups computed",
            context={
                "tokens": len(occurrences),
                "signatures": len(entries),
                "groups": len(groups),
            },
        )
        return groups

    def _slant_groups(self, entries: Sequence[_Entry], processed: Set[int]) -> List[RhymeGroup]:
        remaining = [entry for entry in entries if entry[0].index not in processed]
        groups: List[RhymeGroup] = []

        for anchor, anchor_signature in remaining:
            if anchor.index in processed:
                continue
            matched: List[WordOccurrence] = [anchor]
            for candidate, candidate_signature in remaining:
                if candidate.index == anchor.index or candidate.index in processed:
                    continue
                if rhyme_score(anchor_signature, candidate_signature) is RhymeStrength.SLANT:
                    matched.append(candidate)
            if len(matched) < 2:
                continue

            vowel = base_vowel(anchor_signature.stressed_vowel)
            groups.append(
                RhymeGroup(
                    key=f"{vowel}{SLANT_KEY_SUFFIX}",
                    strength=RhymeStrength.SLANT,
                    color_index=self.color_index(vowel),
                    members=tuple(matched),
                    rhyme_type=RhymeType.SLANT,
                )
            )
            processed.update(occurrence.index for occurrence in matched)

        return groups


def _line_rhyme_type(members: Sequence[WordOccurrence]) -> RhymeType:
    line_ends = sum(1 for member in members if member.is_line_end)
    return RhymeType.END if line_ends >= 2 else RhymeType.INTERNAL


__all__ = ["GroupingEngine", "SLANT_KEY_SUFFIX"]
