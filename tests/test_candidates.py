"""Tests for candidate voicing generation."""

from music21 import key

from voicelead import theory
from voicelead.candidates import generate_candidate_voicings, notes_in_range
from voicelead.constraints import VoiceRange
from voicelead.roman_chord import Quality, RomanChord, ScaleDegree
from voicelead.rule_set import DEFAULT_RULES, RuleSet
from voicelead.voicing import Voice

C = key.Key("C")
E_FLAT = key.Key("E-")
I = RomanChord.triad(ScaleDegree.I, Quality.MAJOR)
V7 = RomanChord(ScaleDegree.V, Quality.MAJOR, Quality.MINOR)


def _names(candidates) -> list[tuple[str, ...]]:
    return [c.voicing.names() for c in candidates]


def test_notes_in_range_orders_by_tone_then_octave() -> None:
    tones = [theory.parse_pitch("C4"), theory.parse_pitch("G4")]
    low, high = theory.parse_pitch("C3"), theory.parse_pitch("C5")
    found = [p.nameWithOctave for p in notes_in_range(tones, low, high)]
    assert found == ["C3", "C4", "C5", "G3", "G4"]


def test_notes_in_range_handles_octave_crossing_spellings() -> None:
    tones = [theory.parse_pitch("B#4")]
    low, high = theory.parse_pitch("C4"), theory.parse_pitch("C5")
    assert [p.nameWithOctave for p in notes_in_range(tones, low, high)] == ["B#3", "B#4"]


def test_every_candidate_passes_every_single_constraint() -> None:
    candidates = generate_candidate_voicings(I, E_FLAT)
    assert candidates
    for candidate in candidates:
        for rule in DEFAULT_RULES.single_constraints:
            assert rule.evaluate(candidate.voicing, I, E_FLAT) is None, (rule, candidate.voicing)


def test_textbook_voicing_is_a_candidate() -> None:
    assert ("C5", "G4", "E4", "C3") in _names(generate_candidate_voicings(I, C))


def test_dominant_seventh_candidates_are_complete() -> None:
    candidates = generate_candidate_voicings(V7, C)
    assert candidates
    assert all(len(c.voicing.pitch_classes()) == 4 for c in candidates)


def test_default_node_scores_are_zero() -> None:
    assert all(c.score == 0 for c in generate_candidate_voicings(I, C))


def test_strict_node_scores_count_unisons() -> None:
    scores = {c.voicing.names(): c.score for c in generate_candidate_voicings(I, C, RuleSet.strict())}
    assert scores[("C5", "G4", "E4", "C3")] == 0
    assert scores[("E4", "E4", "C4", "C3")] == 3


def test_generation_order_is_soprano_major() -> None:
    names = _names(generate_candidate_voicings(I, C))
    soprano_order = [n[0] for n in names]
    expected = [p.nameWithOctave for p in notes_in_range(I.chord_tones(C), *Voice.SOPRANO.range)]
    seen = list(dict.fromkeys(soprano_order))
    assert seen == [s for s in expected if s in seen]


def test_generation_is_deterministic() -> None:
    assert _names(generate_candidate_voicings(I, E_FLAT)) == _names(generate_candidate_voicings(I, E_FLAT))


def test_no_candidates_when_no_chord_tone_fits_a_range() -> None:
    tiny = RuleSet(single_constraints=(VoiceRange({voice: ("D4", "D4") for voice in Voice}),))
    assert generate_candidate_voicings(I, C, tiny) == []
