"""Word tokenization with source spans and line positions."""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import replace
from functools import lru_cache
from typing import List, Tuple

from .models import WordOccurrence

# Letter runs with optional inner apostrophes ("don't", "rock'n'roll").
TOKEN_PATTERN = re.compile(r"[^\W\d_]+(?:['’][^\W\d_]+)*")


@lru_cache(maxsize=64)
def tokenize(text: str) -> Tuple[WordOccurrence, ...]:
    """Return lowercased word occurrences of ``text`` in document order."""

    source = text or ""
    newline_offsets = [match.start() for match in re.finditer("\n", source)]

    occurrences: List[WordOccurrence] = []
    line_positions: dict[int, int] = {}
    for index, match in enumerate(TOKEN_PATTERN.finditer(source)):
        line_index = bisect_right(newline_offsets, match.start())
        position = line_positions.get(line_index, 0)
        line_positions[line_index] = position + 1
        occurrences.append(
            WordOccurrence(
                word=match.group(0).replace("’", "'").lower(),
                start=match.start(),
                end=match.end(),
                line_index=line_index,
                position_in_line=position,
                index=index,
            )
        )

    # A token ends its line when the next token starts on a later line.
    finished: List[WordOccurrence] = []
    for current, following in zip(occurrences, occurrences[1:] + [None]):
        is_line_end = following is None or following.line_index != current.line_index
        if is_line_end:
            current = replace(current, is_line_end=True)
        finished.append(current)
    return tuple(finished)


def token_words(text: str) -> Tuple[str, ...]:
    return tuple(occurrence.word for occurrence in tokenize(text))


__all__ = ["TOKEN_PATTERN", "tokenize", "token_words"]
