"""Flatten rhyme groups into per-word highlight spans for renderers."""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Tuple

from .grouping import GroupingEngine
from .models import Highlight, PhoneticSignature, RhymeGroup


class HighlightProjector:
    """Stateless projection from groups to highlights.

    Each highlight copies its group's color, strength and rhyme type.
    """

    def compute_all(self, groups: Iterable[RhymeGroup]) -> List[Highlight]:
        highlights = [
            Highlight(
                start=member.start,
                end=member.end,
                word=member.word,
                color_index=group.color_index,
                strength=group.strength,
                rhyme_type=group.rhyme_type,
                group_key=group.key,
            )
            for group in groups
            for member in group.members
        ]
        highlights.sort(key=lambda highlight: (highlight.start, highlight.end))
        return highlights

    def project(
        self,
        engine: GroupingEngine,
        text: str,
        signatures: Optional[Mapping[str, PhoneticSignature]] = None,
    ) -> Tuple[List[RhymeGroup], List[Highlight]]:
        groups = engine.compute_groups(text, signatures)
        return groups, self.compute_all(groups)


__all__ = ["HighlightProjector"]
