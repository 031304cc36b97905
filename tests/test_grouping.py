from rhyme_highlighter.core import (
    GroupingEngine,
    PronunciationStore,
    RHYME_COLOR_PALETTE,
    RhymeStrength,
    RhymeType,
    tokenize,
)
from rhyme_highlighter.utils.hashing import fnv1a_32


def _engine(entries):
    return GroupingEngine(PronunciationStore.from_entries(entries))


def _membership(groups):
    return {group.key: sorted(member.word for member in group.members) for group in groups}


def test_tokenize_reports_spans_and_line_positions():
    text = "I write\nat Night, don't"
    tokens = tokenize(text)

    assert [token.word for token in tokens] == ["i", "write", "at", "night", "don't"]
    write = tokens[1]
    assert text[write.start : write.end] == "write"
    assert write.line_index == 0 and write.is_line_end
    assert tokens[3].line_index == 1 and tokens[3].position_in_line == 1
    assert tokens[4].is_line_end and not tokens[3].is_line_end
    assert [token.index for token in tokens] == list(range(5))


def test_perfect_group_for_shared_vowel_and_coda():
    engine = _engine({"write": ["R", "AY1", "T"], "night": ["N", "AY1", "T"]})

    groups = engine.compute_groups("I write at night")

    assert len(groups) == 1
    group = groups[0]
    assert group.key == "AY1"
    assert group.strength is RhymeStrength.PERFECT
    assert group.words == ("write", "night")


def test_near_group_when_codas_differ():
    engine = _engine({"write": ["R", "AY1", "T"], "time": ["T", "AY1", "M"]})

    groups = engine.compute_groups("write and time")

    assert len(groups) == 1
    assert groups[0].strength is RhymeStrength.NEAR
    assert groups[0].key == "AY1"


def test_slant_group_for_similar_vowels():
    engine = _engine({"night": ["N", "AY1", "T"], "day": ["D", "EY1"]})

    groups = engine.compute_groups("night and day")

    assert len(groups) == 1
    group = groups[0]
    assert group.strength is RhymeStrength.SLANT
    assert group.key == "AY_slant"
    assert group.rhyme_type is RhymeType.SLANT
    assert group.color_index == fnv1a_32("AY") % len(RHYME_COLOR_PALETTE)
    assert group.words == ("night", "day")


def test_color_index_is_stable_hash_of_key(sample_store):
    engine = GroupingEngine(sample_store)

    groups = engine.compute_groups("write night light")

    assert groups[0].color_index == fnv1a_32("AY1") % len(RHYME_COLOR_PALETTE)
    assert engine.color_index("AY1") == groups[0].color_index


def test_repeated_computation_is_deterministic(sample_store):
    engine = GroupingEngine(sample_store)
    text = "Write by night, sit all day;\ncat and bet, the time is light"

    first = engine.compute_groups(text)
    second = engine.compute_groups(text)

    assert _membership(first) == _membership(second)
    assert {g.key: g.color_index for g in first} == {g.key: g.color_index for g in second}
    assert [g.strength for g in first] == [g.strength for g in second]


def test_no_occurrence_appears_in_two_groups(sample_store):
    engine = GroupingEngine(sample_store)
    text = "night day sit write time cat bet light day night"

    groups = engine.compute_groups(text)
    seen = [member.index for group in groups for member in group.members]

    assert len(seen) == len(set(seen))
    assert all(len(group.members) >= 2 for group in groups)


def test_unknown_and_unstressed_words_are_excluded(sample_store):
    engine = GroupingEngine(sample_store)

    groups = engine.compute_groups("the the the zzyzx zzyzx")

    assert groups == []
    assert "the" not in engine.resolve_signatures(["the", "zzyzx", "night"])


def test_slant_anchor_follows_document_order():
    entries = {
        "night": ["N", "AY1", "T"],
        "day": ["D", "EY1"],
        "sit": ["S", "IH1", "T"],
    }
    engine = _engine(entries)

    # day~night and night~sit, but day and sit are not similar.
    day_first = engine.compute_groups("day night sit")
    night_first = engine.compute_groups("night day sit")

    assert _membership(day_first) == {"EY_slant": ["day", "night"]}
    assert _membership(night_first) == {"AY_slant": ["day", "night", "sit"]}


def test_slant_pass_ignores_words_already_grouped(sample_store):
    engine = GroupingEngine(sample_store)

    groups = engine.compute_groups("night light day")

    strengths = {group.key: group.strength for group in groups}
    assert strengths == {"AY1": RhymeStrength.PERFECT}


def test_line_end_groups_are_end_rhymes(sample_store):
    engine = GroupingEngine(sample_store)

    groups = engine.compute_groups("I write\nall night\nand the cat")

    assert groups[0].key == "AY1"
    assert groups[0].rhyme_type is RhymeType.END


def test_supplied_signatures_skip_store_lookups(sample_store):
    engine = GroupingEngine(sample_store)
    signatures = engine.resolve_signatures(["night", "light"])

    groups = engine.compute_groups("night light write", signatures=signatures)

    assert groups[0].words == ("night", "light")


def test_unique_words_for_rhyme_map(sample_store):
    engine = GroupingEngine(sample_store)

    group = engine.compute_groups("night light night")[0]

    assert group.unique_words() == ("light", "night")
    assert group.first_offset == 0
