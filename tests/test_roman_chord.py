"""Unit tests for RomanChord construction, naming and realisation."""

import pytest
from music21 import key

from voicelead.roman_chord import (
    InvalidInversionError,
    Quality,
    RomanChord,
    ScaleDegree,
    bass_pitch,
    chord_tones,
)

E_FLAT = key.Key("E-")
C_MAJOR = key.Key("C")
C_MINOR = key.Key("c")


def _names(pitches) -> list[str]:
    return [p.name for p in pitches]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def test_triad_rejects_third_inversion() -> None:
    with pytest.raises(InvalidInversionError):
        RomanChord.triad(ScaleDegree.I, Quality.MAJOR, inversion=3)


def test_seventh_chord_accepts_third_inversion() -> None:
    chord = RomanChord(ScaleDegree.V, Quality.MAJOR, Quality.MINOR, inversion=3)
    assert len(chord) == 4


def test_seventh_chord_rejects_fourth_inversion() -> None:
    with pytest.raises(InvalidInversionError):
        RomanChord(ScaleDegree.V, Quality.MAJOR, Quality.MINOR, inversion=4)


def test_negative_inversion_rejected() -> None:
    with pytest.raises(ValueError):
        RomanChord.triad(ScaleDegree.I, Quality.MAJOR, inversion=-1)


def test_with_inversion_validates() -> None:
    chord = RomanChord.triad(ScaleDegree.IV, Quality.MAJOR)
    assert chord.with_inversion(2).inversion == 2
    with pytest.raises(InvalidInversionError):
        chord.with_inversion(3)


def test_diatonic_reads_qualities_from_major_scale() -> None:
    assert RomanChord.diatonic(ScaleDegree.II, C_MAJOR).triad_quality is Quality.MINOR
    assert RomanChord.diatonic(ScaleDegree.VII, C_MAJOR).triad_quality is Quality.DIMINISHED
    dominant_seventh = RomanChord.diatonic(ScaleDegree.V, E_FLAT, seventh=True)
    assert dominant_seventh.triad_quality is Quality.MAJOR
    assert dominant_seventh.seventh_quality is Quality.MINOR


def test_diatonic_raises_leading_tone_for_dominant_in_minor() -> None:
    dominant = RomanChord.diatonic(ScaleDegree.V, C_MINOR)
    assert dominant.triad_quality is Quality.MAJOR
    assert _names(dominant.chord_tones(C_MINOR)) == ["G", "B", "D"]


def test_diatonic_keeps_natural_mediant_in_minor() -> None:
    mediant = RomanChord.diatonic(ScaleDegree.III, C_MINOR)
    assert mediant.triad_quality is Quality.MAJOR
    assert _names(mediant.chord_tones(C_MINOR)) == ["E-", "G", "B-"]


def test_from_figure_reads_inversion_and_seventh() -> None:
    chord = RomanChord.from_figure("V65", E_FLAT)
    assert chord == RomanChord(ScaleDegree.V, Quality.MAJOR, Quality.MINOR, inversion=1)


def test_from_figure_first_inversion_triad() -> None:
    assert RomanChord.from_figure("ii6", C_MAJOR) == RomanChord.triad(
        ScaleDegree.II, Quality.MINOR, inversion=1
    )


def test_from_figure_leading_tone_seventh_in_minor() -> None:
    chord = RomanChord.from_figure("viio7", C_MINOR)
    assert _names(chord.chord_tones(C_MINOR)) == ["B", "D", "F", "A-"]


@pytest.mark.parametrize(
    "figure, k",
    [
        ("VII", C_MINOR),  # subtonic B- major, not the leading tone
        ("V7/V", C_MAJOR),  # applied dominant on D
        ("bII6", C_MAJOR),  # Neapolitan on D-
    ],
)
def test_from_figure_rejects_chords_off_the_key_degrees(figure: str, k: key.Key) -> None:
    with pytest.raises(ValueError, match="applied or chromatic"):
        RomanChord.from_figure(figure, k)


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    ("chord", "expected"),
    [
        (RomanChord.triad(ScaleDegree.I, Quality.MAJOR), "I"),
        (RomanChord.triad(ScaleDegree.V, Quality.MAJOR, inversion=1), "V6"),
        (RomanChord.triad(ScaleDegree.I, Quality.MAJOR, inversion=2), "I64"),
        (RomanChord(ScaleDegree.V, Quality.MAJOR, Quality.MINOR), "V7"),
        (RomanChord(ScaleDegree.II, Quality.MINOR, Quality.MINOR, inversion=1), "ii65"),
        (RomanChord(ScaleDegree.VII, Quality.DIMINISHED, Quality.DIMINISHED), "vii°7"),
        (RomanChord(ScaleDegree.VII, Quality.DIMINISHED, Quality.MINOR, inversion=2), "viiø43"),
        (RomanChord(ScaleDegree.V, Quality.MAJOR, Quality.MINOR, inversion=3), "V42"),
        (RomanChord.triad(ScaleDegree.III, Quality.AUGMENTED), "III+"),
    ],
)
def test_str_figures(chord: RomanChord, expected: str) -> None:
    assert str(chord) == expected


# ---------------------------------------------------------------------------
# Realisation
# ---------------------------------------------------------------------------

def test_chord_tones_of_tonic_in_e_flat() -> None:
    chord = RomanChord.triad(ScaleDegree.I, Quality.MAJOR)
    assert _names(chord_tones(chord, E_FLAT)) == ["E-", "G", "B-"]


def test_chord_tones_of_dominant_seventh() -> None:
    chord = RomanChord(ScaleDegree.V, Quality.MAJOR, Quality.MINOR)
    assert _names(chord_tones(chord, E_FLAT)) == ["B-", "D", "F", "A-"]


def test_leading_tone_seventh_in_minor_uses_raised_root() -> None:
    chord = RomanChord(ScaleDegree.VII, Quality.DIMINISHED, Quality.DIMINISHED)
    assert _names(chord.chord_tones(C_MINOR)) == ["B", "D", "F", "A-"]


def test_bass_pitch_follows_inversion() -> None:
    first_inversion = RomanChord.triad(ScaleDegree.V, Quality.MAJOR, inversion=1)
    assert bass_pitch(first_inversion, E_FLAT).name == "D"
    third_inversion = RomanChord(ScaleDegree.V, Quality.MAJOR, Quality.MINOR, inversion=3)
    assert third_inversion.bass_pitch(E_FLAT).name == "A-"


def test_pitch_class_set() -> None:
    chord = RomanChord.triad(ScaleDegree.IV, Quality.MAJOR)
    assert chord.pitch_class_set(C_MAJOR) == frozenset({5, 9, 0})
