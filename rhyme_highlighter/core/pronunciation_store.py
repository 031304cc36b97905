"""Word to phoneme lookup backed by a CMU-style pronouncing dictionary."""

from __future__ import annotations

import os
import threading
from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple

import pronouncing

from rhyme_highlighter.utils.observability import get_logger
from rhyme_highlighter.utils.settings import CMUDICT_PATH_ENV

COMMENT_MARKER = ";;;"

Phonemes = Tuple[str, ...]

# Used whenever the real dictionary cannot be read. Small on purpose: it keeps
# the editor useful offline, nothing more.
FALLBACK_DICTIONARY: Dict[str, Phonemes] = {
    "love": ("L", "AH1", "V"),
    "dove": ("D", "AH1", "V"),
    "above": ("AH0", "B", "AH1", "V"),
    "shove": ("SH", "AH1", "V"),
    "cat": ("K", "AE1", "T"),
    "hat": ("HH", "AE1", "T"),
    "bat": ("B", "AE1", "T"),
    "rat": ("R", "AE1", "T"),
    "mat": ("M", "AE1", "T"),
    "sat": ("S", "AE1", "T"),
    "day": ("D", "EY1"),
    "way": ("W", "EY1"),
    "say": ("S", "EY1"),
    "pay": ("P", "EY1"),
    "play": ("P", "L", "EY1"),
    "stay": ("S", "T", "EY1"),
    "night": ("N", "AY1", "T"),
    "light": ("L", "AY1", "T"),
    "fight": ("F", "AY1", "T"),
    "right": ("R", "AY1", "T"),
    "sight": ("S", "AY1", "T"),
    "bright": ("B", "R", "AY1", "T"),
    "time": ("T", "AY1", "M"),
    "rhyme": ("R", "AY1", "M"),
    "climb": ("K", "L", "AY1", "M"),
    "chime": ("CH", "AY1", "M"),
    "sublime": ("S", "AH0", "B", "L", "AY1", "M"),
}

_DICTIONARY_FILENAMES = ("cmudict.txt", "cmudict.7b")


def parse_dictionary_lines(lines: Iterable[str]) -> Dict[str, Phonemes]:
    """Parse ``WORD PHONEME...`` lines into a lowercase-keyed mapping.

    Comment and malformed lines are skipped and later duplicates replace
    earlier ones. Variant keys such as ``word(2)`` are stored verbatim.
    """

    entries: Dict[str, Phonemes] = {}
    for line in lines:
        entry = line.strip()
        if not entry or entry.startswith(COMMENT_MARKER):
            continue
        parts = entry.split()
        if len(parts) < 2:
            continue
        word, *phones = parts
        entries[word.lower()] = tuple(phones)
    return entries


def _default_dictionary_path() -> Optional[Path]:
    env_path = os.environ.get(CMUDICT_PATH_ENV, "").strip()
    if env_path:
        return Path(env_path)

    module_path = Path(__file__).resolve()
    for directory in (module_path.parent, module_path.parents[1], module_path.parents[2]):
        for filename in _DICTIONARY_FILENAMES:
            candidate = directory / filename
            try:
                if candidate.exists():
                    return candidate
            except OSError:
                continue
    return None


def _iter_pronouncing_lines() -> Iterator[str]:
    """Re-emit the CMU data bundled with ``pronouncing`` as dictionary lines.

    ``pronouncing`` strips variant markers, so they are restored here to keep
    the first listed pronunciation under the bare word.
    """

    pronouncing.init_cmu()
    seen: Counter[str] = Counter()
    for word, phones in pronouncing.pronunciations or ():
        seen[word] += 1
        key = word if seen[word] == 1 else f"{word}({seen[word]})"
        yield f"{key} {phones}"


class PronunciationStore:
    """Read-only pronunciation lookup loaded once on first use.

    Without an explicit ``dict_path`` the store looks at
    ``RHYMES_CMUDICT_PATH``, then for a ``cmudict.txt``/``cmudict.7b`` next to
    the package, then at the dictionary shipped with ``pronouncing``. Any
    failure to obtain entries falls back to :data:`FALLBACK_DICTIONARY`.
    """

    def __init__(
        self,
        dict_path: Optional[Path | str] = None,
        *,
        lines: Optional[Iterable[str]] = None,
        entries: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        self.dict_path: Optional[Path] = Path(dict_path) if dict_path is not None else None
        self._pending_lines = lines
        self._pending_entries = entries
        self._explicit_source = dict_path is not None or lines is not None or entries is not None
        self._pronunciations: Dict[str, Phonemes] = {}
        self._load_lock = threading.Lock()
        self._loaded = False
        self.source: Optional[str] = None
        self._logger = get_logger(__name__).bind(component="pronunciation_store")

    @classmethod
    def from_entries(cls, entries: Mapping[str, Sequence[str]]) -> "PronunciationStore":
        return cls(entries=entries)

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "PronunciationStore":
        return cls(lines=lines)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        with self._load_lock:
            if self._loaded:
                return
            pronunciations, source = self._load()
            if not pronunciations:
                self._logger.warning(
                    "Pronunciation dictionary unavailable, using embedded fallback",
                    context={"source": source, "dict_path": self.dict_path},
                )
                pronunciations, source = dict(FALLBACK_DICTIONARY), "fallback"
            self._pronunciations = pronunciations
            self.source = source
            self._pending_lines = None
            self._pending_entries = None
            self._loaded = True
            self._logger.info(
                "Pronunciation dictionary loaded",
                context={"source": source, "entries": len(pronunciations)},
            )

    def _load(self) -> Tuple[Dict[str, Phonemes], str]:
        if self._pending_entries is not None:
            return (
                {
                    str(word).lower(): tuple(phones)
                    for word, phones in self._pending_entries.items()
                    if word and phones
                },
                "entries",
            )
        if self._pending_lines is not None:
            return parse_dictionary_lines(self._pending_lines), "lines"

        path = self.dict_path
        if path is None and not self._explicit_source:
            path = _default_dictionary_path()
            self.dict_path = path

        if path is not None:
            try:
                with path.open("r", encoding="utf-8") as handle:
                    return parse_dictionary_lines(handle), "file"
            except (OSError, UnicodeDecodeError) as exc:
                self._logger.warning(
                    "Could not read pronunciation dictionary",
                    context={"dict_path": path, "error": str(exc)},
                )
                return {}, "file"

        try:
            return parse_dictionary_lines(_iter_pronouncing_lines()), "pronouncing"
        except (OSError, ValueError, UnicodeDecodeError) as exc:
            self._logger.warning(
                "Bundled CMU dictionary could not be parsed",
                context={"error": str(exc)},
            )
            return {}, "pronouncing"

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def lookup(self, word: str) -> Optional[Phonemes]:
        """Exact, case-insensitive lookup; ``None`` for unknown words."""

        if not word:
            return None
        self._ensure_loaded()
        return self._pronunciations.get(word.lower())

    def words(self) -> Iterator[str]:
        """Dictionary keys in load order."""

        self._ensure_loaded()
        return iter(tuple(self._pronunciations))

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and self.lookup(word) is not None

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._pronunciations)


_DEFAULT_STORE: Optional[PronunciationStore] = None
_DEFAULT_STORE_LOCK = threading.Lock()


def default_store() -> PronunciationStore:
    """Process-wide store for callers that do not inject their own."""

    global _DEFAULT_STORE
    with _DEFAULT_STORE_LOCK:
        if _DEFAULT_STORE is None:
            _DEFAULT_STORE = PronunciationStore()
        return _DEFAULT_STORE


__all__ = [
    "COMMENT_MARKER",
    "FALLBACK_DICTIONARY",
    "PronunciationStore",
    "default_store",
    "parse_dictionary_lines",
]
