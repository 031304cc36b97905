"""Phonetic rhyme detection core for rhyme_highlighter."""

from .cadence import (
    CadenceAnalyzer,
    CadenceMetrics,
    LineMetrics,
    SyllableProfile,
    SyllableStressAnalyzer,
)
from .classifier import (
    RhymeComparison,
    SIMILAR_VOWEL_SETS,
    codas_similar,
    compare_signatures,
    rhyme_score,
)
from .grouping import GroupingEngine
from .highlights import HighlightProjector
from .models import (
    RHYME_COLOR_PALETTE,
    AnalysisSnapshot,
    Highlight,
    PhoneticSignature,
    RhymeGroup,
    RhymeStrength,
    RhymeType,
    WordOccurrence,
)
from .pronunciation_store import FALLBACK_DICTIONARY, PronunciationStore, default_store
from .signature import base_vowel, describe_phonemes, extract_signature, rhyme_tail
from .suggestions import RhymeSuggester
from .tokenizer import tokenize

__all__ = [
    "AnalysisSnapshot",
    "CadenceAnalyzer",
    "CadenceMetrics",
    "FALLBACK_DICTIONARY",
    "GroupingEngine",
    "Highlight",
    "HighlightProjector",
    "LineMetrics",
    "PhoneticSignature",
    "PronunciationStore",
    "RHYME_COLOR_PALETTE",
    "RhymeComparison",
    "RhymeGroup",
    "RhymeStrength",
    "RhymeSuggester",
    "RhymeType",
    "SIMILAR_VOWEL_SETS",
    "SyllableProfile",
    "SyllableStressAnalyzer",
    "WordOccurrence",
    "base_vowel",
    "codas_similar",
    "compare_signatures",
    "default_store",
    "describe_phonemes",
    "extract_signature",
    "rhyme_score",
    "rhyme_tail",
    "tokenize",
]
