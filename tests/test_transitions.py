"""Tests for transition table construction."""

from music21 import key

from voicelead.candidates import generate_candidate_voicings
from voicelead.roman_chord import Quality, RomanChord, ScaleDegree
from voicelead.rule_set import DEFAULT_RULES
from voicelead.transitions import build_transition_table
from voicelead.voicing import CandidateVoicing, Voicing

C = key.Key("C")
I = RomanChord.triad(ScaleDegree.I, Quality.MAJOR)
II = RomanChord.triad(ScaleDegree.II, Quality.MINOR)
V = RomanChord.triad(ScaleDegree.V, Quality.MAJOR)


def _candidates(*names: str) -> list[CandidateVoicing]:
    return [CandidateVoicing(Voicing.from_names(n), 0) for n in names]


def test_table_holds_scores_of_valid_pairs_only() -> None:
    prev = _candidates("C5 G4 E4 C3")
    curr = _candidates("B4 G4 D4 G3", "D5 A4 F4 D3")
    table = build_transition_table(prev, curr, I, V, C)
    assert table == {(0, 0): 10}


def test_table_is_empty_when_nothing_connects() -> None:
    prev = _candidates("C5 G4 E4 C3")
    curr = _candidates("D5 A4 F4 D3")
    assert build_transition_table(prev, curr, I, II, C) == {}


def test_transition_closure() -> None:
    prev = generate_candidate_voicings(I, C)[:12]
    curr = generate_candidate_voicings(V, C)[:12]
    table = build_transition_table(prev, curr, I, V, C)
    assert table

    for i, (first, _) in enumerate(prev):
        for j, (second, _) in enumerate(curr):
            violations = [
                rule.evaluate(first, second, I, V, C) for rule in DEFAULT_RULES.pairwise_constraints
            ]
            if (i, j) in table:
                assert all(v is None for v in violations)
                assert table[(i, j)] == DEFAULT_RULES.window_penalty(first, second, I, V, C)
            else:
                assert any(v is not None for v in violations)
