"""Application wiring for embedding the rhyme engine in an editor."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from rhyme_highlighter.core import (
    CadenceAnalyzer,
    CadenceMetrics,
    GroupingEngine,
    HighlightProjector,
    PronunciationStore,
    RhymeGroup,
    RhymeSuggester,
    describe_phonemes,
)
from rhyme_highlighter.utils.observability import get_logger
from rhyme_highlighter.utils.settings import AnalysisSettings

from .scheduler import AnalysisScheduler


class RhymeHighlighterApp:
    """Facade bundling the store, engine and scheduler for one document."""

    def __init__(
        self,
        *,
        settings: Optional[AnalysisSettings] = None,
        store: Optional[PronunciationStore] = None,
        engine: Optional[GroupingEngine] = None,
        scheduler: Optional[AnalysisScheduler] = None,
        **scheduler_options: Any,
    ) -> None:
        self.settings = settings or AnalysisSettings.from_env()
        self._logger = get_logger(__name__).bind(component="app_facade")

        if store is None:
            if engine is not None:
                store = engine.store
            elif scheduler is not None:
                store = scheduler.engine.store
            else:
                store = PronunciationStore(self.settings.dictionary_path)
        self.store = store
        self.engine = engine or GroupingEngine(self.store)
        self.projector = HighlightProjector()
        self.scheduler = scheduler or AnalysisScheduler(
            self.engine,
            self.projector,
            settings=self.settings,
            **scheduler_options,
        )
        self.cadence_analyzer = CadenceAnalyzer(self.store)
        self.suggester = RhymeSuggester(self.store)

        self._logger.info(
            "Rhyme highlighter dependencies wired",
            context={
                "store": type(self.store).__name__,
                "dictionary_path": self.settings.dictionary_path,
            },
        )

    def edit(self, text: str) -> bool:
        """Forward an edit from the editing surface."""

        return self.scheduler.update_if_needed(text)

    def rhyme_map(self) -> List[Dict[str, Any]]:
        """Rhyme groups in first-occurrence order, shaped for a list view."""

        return [
            {
                "key": group.key,
                "strength": group.strength.label,
                "color_index": group.color_index,
                "rhyme_type": group.rhyme_type.value,
                "words": list(group.unique_words()),
            }
            for group in self.scheduler.groups
        ]

    def suggestions(self, group: RhymeGroup, limit: int = 3) -> List[str]:
        return self.suggester.suggest(group, self.scheduler.snapshot().text, limit=limit)

    def cadence(self) -> CadenceMetrics:
        return self.scheduler.cadence(self.cadence_analyzer)

    def describe_word(self, word: str) -> Dict[str, Any]:
        return describe_phonemes(word, self.store)

    def close(self) -> None:
        self.scheduler.close()

    def __enter__(self) -> "RhymeHighlighterApp":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["RhymeHighlighterApp"]
