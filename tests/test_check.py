"""Tests for check_voice_leading diagnostics."""

import pytest
from music21 import key

from voicelead.check import check_voice_leading
from voicelead.roman_chord import Quality, RomanChord, ScaleDegree
from voicelead.rule_set import RuleSet
from voicelead.violations import ViolationKind, VoiceLeadingError
from voicelead.voicing import Voice, Voicing

C = key.Key("C")
I = RomanChord.triad(ScaleDegree.I, Quality.MAJOR)
II = RomanChord.triad(ScaleDegree.II, Quality.MINOR)
V = RomanChord.triad(ScaleDegree.V, Quality.MAJOR)


def _vs(*names: str) -> list[Voicing]:
    return [Voicing.from_names(n) for n in names]


def test_valid_cadence_scores_sum_of_transitions() -> None:
    voicings = _vs("C5 G4 E4 C3", "B4 G4 D4 G3", "C5 G4 E4 C4")
    assert check_voice_leading(C, [I, V, I], voicings) == 19


def test_single_chord_scores_node_penalty() -> None:
    assert check_voice_leading(C, [I], _vs("C5 G4 E4 C3")) == 0
    assert check_voice_leading(C, [I], _vs("E4 E4 C4 C3"), RuleSet.strict()) == 3


def test_empty_progression_scores_zero() -> None:
    assert check_voice_leading(C, [], []) == 0


def test_mismatched_sizes() -> None:
    with pytest.raises(VoiceLeadingError) as excinfo:
        check_voice_leading(C, [I, V], _vs("C5 G4 E4 C3"))
    assert excinfo.value.kind is ViolationKind.MISMATCHED_SIZES


def test_single_voicing_failure_is_located_at_its_chord() -> None:
    voicings = _vs("C5 G4 E4 C3", "B4 G4 D4 G3", "C5 G4 E4 E3")
    with pytest.raises(VoiceLeadingError) as excinfo:
        check_voice_leading(C, [I, V, I], voicings)
    assert excinfo.value.location == 2
    assert excinfo.value.kind is ViolationKind.INVALID_BASS
    assert "chord 2" in str(excinfo.value)


def test_pairwise_failure_is_located_at_first_chord_of_pair() -> None:
    voicings = _vs("C5 G4 E4 C3", "C5 G4 E4 C3", "D5 A4 F4 D3")
    with pytest.raises(VoiceLeadingError) as excinfo:
        check_voice_leading(C, [I, I, II], voicings)
    assert excinfo.value.location == 1
    assert excinfo.value.kind is ViolationKind.ILLEGAL_PARALLEL
    assert excinfo.value.violation.voices == (Voice.SOPRANO, Voice.BASS)
