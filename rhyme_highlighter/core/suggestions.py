"""Dictionary rhyme suggestions for an existing rhyme group."""

from __future__ import annotations

import re
from typing import List, Optional

from .classifier import rhyme_score
from .models import RhymeGroup, RhymeStrength
from .pronunciation_store import PronunciationStore, default_store
from .signature import extract_signature
from .tokenizer import token_words

DEFAULT_SUGGESTION_LIMIT = 3

# Alternate pronunciations are stored as ``word(2)``.
_VARIANT_KEY = re.compile(r"\(\d+\)$")


class RhymeSuggester:
    """Proposes words that rhyme with a group but are not yet in the text."""

    def __init__(self, store: Optional[PronunciationStore] = None) -> None:
        self.store = store if store is not None else default_store()

    def suggest(
        self,
        group: RhymeGroup,
        text: str,
        limit: int = DEFAULT_SUGGESTION_LIMIT,
    ) -> List[str]:
        """Perfect rhymes first, topped up with near rhymes, sorted.

        Slant matches are never suggested. The dictionary scan stops as soon
        as ``limit`` perfect rhymes have been found.
        """

        if limit <= 0 or not group.members:
            return []

        anchor_phonemes = self.store.lookup(group.members[0].word)
        anchor = extract_signature(anchor_phonemes) if anchor_phonemes else None
        if anchor is None:
            return []

        excluded = set(token_words(text)) | set(group.words)
        perfect: List[str] = []
        near: List[str] = []

        for word in self.store.words():
            if word in excluded or _VARIANT_KEY.search(word):
                continue
            phonemes = self.store.lookup(word)
            signature = extract_signature(phonemes) if phonemes else None
            if signature is None:
                continue
            strength = rhyme_score(anchor, signature)
            if strength is RhymeStrength.PERFECT:
                perfect.append(word.capitalize())
                if len(perfect) >= limit:
                    break
            elif strength is RhymeStrength.NEAR:
                near.append(word.capitalize())

        return sorted((perfect + near)[:limit])


__all__ = ["DEFAULT_SUGGESTION_LIMIT", "RhymeSuggester"]
