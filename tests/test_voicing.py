"""Unit tests for Voice, Voicing and motion classification."""

import pytest

from voicelead import theory
from voicelead.voicing import Motion, Solution, Voice, Voicing, motion_between


def _v(names: str) -> Voicing:
    return Voicing.from_names(names)


def test_voices_are_ordered_top_down() -> None:
    assert list(Voice) == [Voice.SOPRANO, Voice.ALTO, Voice.TENOR, Voice.BASS]
    assert Voice.SOPRANO < Voice.BASS


def test_bass_range() -> None:
    low, high = Voice.BASS.range
    assert (low.nameWithOctave, high.nameWithOctave) == ("E2", "D4")


def test_from_names_string_and_sequence_agree() -> None:
    assert _v("B-4 E-4 G3 E-3").names() == Voicing.from_names(["B-4", "E-4", "G3", "E-3"]).names()


def test_from_names_requires_four_pitches() -> None:
    with pytest.raises(ValueError):
        _v("C5 G4 E4")


def test_from_names_requires_octaves() -> None:
    with pytest.raises(ValueError):
        _v("C5 G4 E4 C")


def test_indexing_by_voice() -> None:
    voicing = _v("C5 G4 E4 C3")
    assert voicing[Voice.ALTO].nameWithOctave == "G4"
    assert voicing.bass.nameWithOctave == "C3"
    assert [p.nameWithOctave for p in voicing] == ["C5", "G4", "E4", "C3"]


def test_with_note_returns_modified_copy() -> None:
    voicing = _v("C5 G4 E4 C3")
    changed = voicing.with_note(Voice.TENOR, theory.parse_pitch("C4"))
    assert changed.names() == ("C5", "G4", "C4", "C3")
    assert voicing.names() == ("C5", "G4", "E4", "C3")


def test_pitch_classes_and_str() -> None:
    voicing = _v("C5 G4 E4 C3")
    assert voicing.pitch_classes() == frozenset({0, 4, 7})
    assert str(voicing) == "C5 G4 E4 C3"


def test_solution_is_a_plain_pair() -> None:
    assert Solution(3, ()) == (3, ())


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        ("C5 G4 E4 C3", "C5 A4 F4 F3", Motion.OBLIQUE),
        ("C5 G4 E4 C3", "B4 G4 D4 G3", Motion.CONTRARY),
        ("C5 G4 E4 C3", "D5 A4 F4 D3", Motion.PARALLEL),
        ("B4 G4 D4 G3", "C5 G4 E4 C4", Motion.SIMILAR),
    ],
)
def test_outer_voice_motion(first: str, second: str, expected: Motion) -> None:
    assert motion_between(Voice.SOPRANO, Voice.BASS, _v(first), _v(second)) is expected


def test_voice_against_itself_is_oblique() -> None:
    assert motion_between(Voice.ALTO, Voice.ALTO, _v("C5 G4 E4 C3"), _v("D5 A4 F4 D3")) is Motion.OBLIQUE
