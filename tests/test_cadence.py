import pytest

from rhyme_highlighter.core import (
    CadenceAnalyzer,
    CadenceMetrics,
    GroupingEngine,
    HighlightProjector,
    LineMetrics,
    PronunciationStore,
    SyllableStressAnalyzer,
)


@pytest.fixture
def cadence_store():
    return PronunciationStore.from_entries(
        {
            "information": ["IH2", "N", "F", "ER0", "M", "EY1", "SH", "AH0", "N"],
            "night": ["N", "AY1", "T"],
            "light": ["L", "AY1", "T"],
            "the": ["DH", "AH0"],
            "sublime": ["S", "AH0", "B", "L", "AY1", "M"],
        }
    )


def test_syllables_and_primary_stresses(cadence_store):
    analyzer = SyllableStressAnalyzer(cadence_store)

    profile = analyzer.analyze("Information")

    assert profile.syllables == 4
    assert profile.stresses == (2,)


def test_unknown_word_has_no_syllables(cadence_store):
    profile = SyllableStressAnalyzer(cadence_store).analyze("zzyzx")

    assert profile.syllables == 0
    assert profile.stresses == ()


def test_cadence_per_line_metrics(cadence_store):
    text = "the night\n\nsublime light"
    groups = GroupingEngine(cadence_store).compute_groups(text)
    highlights = HighlightProjector().compute_all(groups)

    metrics = CadenceAnalyzer(cadence_store).analyze(text, highlights)

    assert metrics.lines == (
        LineMetrics(line_index=0, syllable_count=2, stress_count=1, rhyme_count=1),
        LineMetrics(line_index=1, syllable_count=0, stress_count=0, rhyme_count=0),
        LineMetrics(line_index=2, syllable_count=3, stress_count=2, rhyme_count=2),
    )
    assert metrics.average_syllables == pytest.approx(5 / 3)
    mean = 5 / 3
    expected_variance = ((2 - mean) ** 2 + (0 - mean) ** 2 + (3 - mean) ** 2) / 3
    assert metrics.syllable_variance == pytest.approx(expected_variance)


def test_empty_metrics_are_zero():
    metrics = CadenceMetrics()

    assert metrics.average_syllables == 0.0
    assert metrics.syllable_variance == 0.0


def test_consistent_meter_has_zero_variance(cadence_store):
    metrics = CadenceAnalyzer(cadence_store).analyze("night light\nlight night")

    assert metrics.average_syllables == 2
    assert metrics.syllable_variance == 0
