from conftest import ImmediateExecutor

from rhyme_highlighter.app import AnalysisScheduler
from rhyme_highlighter.core import (
    FALLBACK_DICTIONARY,
    CadenceAnalyzer,
    GroupingEngine,
    PronunciationStore,
    RhymeSuggester,
)
from rhyme_highlighter.core.pronunciation_store import parse_dictionary_lines
from rhyme_highlighter.utils import AnalysisSettings


def test_parse_dictionary_lines_skips_comments_and_lowercases():
    entries = parse_dictionary_lines(
        [
            ";;; comment line",
            "",
            "NIGHT  N AY1 T",
            "BROKEN",
            "Day D EY1",
        ]
    )

    assert entries == {"night": ("N", "AY1", "T"), "day": ("D", "EY1")}


def test_parse_dictionary_lines_later_duplicates_overwrite():
    entries = parse_dictionary_lines(["READ R IY1 D", "read R EH1 D"])

    assert entries["read"] == ("R", "EH1", "D")


def test_variant_markers_do_not_shadow_primary_pronunciation():
    entries = parse_dictionary_lines(["LIVE L IH1 V", "LIVE(2) L AY1 V"])

    assert entries["live"] == ("L", "IH1", "V")
    assert entries["live(2)"] == ("L", "AY1", "V")


def test_store_reads_dictionary_file(tmp_path):
    dict_path = tmp_path / "cmudict.txt"
    dict_path.write_text(";;; test data\nTEST  T EH1 S T\n", encoding="utf-8")

    store = PronunciationStore(dict_path)

    assert store.lookup("Test") == ("T", "EH1", "S", "T")
    assert store.source == "file"
    assert len(store) == 1


def test_missing_dictionary_falls_back_silently(tmp_path):
    store = PronunciationStore(tmp_path / "missing.txt")

    assert store.lookup("night") == ("N", "AY1", "T")
    assert store.source == "fallback"
    assert len(store) == len(FALLBACK_DICTIONARY)


def test_unparsable_dictionary_falls_back(tmp_path):
    dict_path = tmp_path / "cmudict.txt"
    dict_path.write_text(";;; only comments\nlonely\n", encoding="utf-8")

    store = PronunciationStore(dict_path)

    assert store.source == "fallback"
    assert "rhyme" in store


def test_undecodable_dictionary_falls_back(tmp_path):
    dict_path = tmp_path / "cmudict.txt"
    dict_path.write_bytes(b"\xff\xfe\x00garbage \x81\x82")

    store = PronunciationStore(dict_path)

    assert store.source == "fallback"


def test_lookup_is_exact_match_only(sample_store):
    assert sample_store.lookup("NIGHT") == ("N", "AY1", "T")
    assert sample_store.lookup("nights") is None
    assert sample_store.lookup("nigh") is None
    assert sample_store.lookup("") is None


def test_lines_are_consumed_once():
    consumed = []

    def lines():
        for line in ["CAT K AE1 T", "HAT HH AE1 T"]:
            consumed.append(line)
            yield line

    store = PronunciationStore.from_lines(lines())

    assert store.lookup("cat") == ("K", "AE1", "T")
    assert store.lookup("hat") == ("HH", "AE1", "T")
    assert len(consumed) == 2
    assert store.source == "lines"


def test_words_preserve_load_order():
    store = PronunciationStore.from_lines(["B B IY1", "A EY1", "C S IY1"])

    assert list(store.words()) == ["b", "a", "c"]


def test_environment_path_is_used(tmp_path, monkeypatch):
    dict_path = tmp_path / "custom.dict"
    dict_path.write_text("ORANGE AO1 R AH0 N JH\n", encoding="utf-8")
    monkeypatch.setenv("RHYMES_CMUDICT_PATH", str(dict_path))

    store = PronunciationStore()

    assert store.lookup("orange") == ("AO1", "R", "AH0", "N", "JH")
    assert store.source == "file"


def test_default_store_uses_bundled_cmu_data(monkeypatch):
    monkeypatch.delenv("RHYMES_CMUDICT_PATH", raising=False)

    store = PronunciationStore()

    assert store.lookup("night") == ("N", "AY1", "T")
    assert store.source == "pronouncing"
    assert len(store) > len(FALLBACK_DICTIONARY)


def test_wiring_components_does_not_load_the_dictionary():
    store = PronunciationStore.from_lines(["NIGHT N AY1 T", "LIGHT L AY1 T"])

    GroupingEngine(store)
    CadenceAnalyzer(store)
    RhymeSuggester(store)
    AnalysisScheduler(store=store, settings=AnalysisSettings(), executor=ImmediateExecutor())

    assert store.source is None

    assert store.lookup("night") == ("N", "AY1", "T")
    assert store.source == "lines"
