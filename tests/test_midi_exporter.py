"""Tests for MidiExporter."""

import pytest
from midiutil import MIDIFile

from voicelead.midi_exporter import CHOIR_PROGRAM, VOICE_TRACKS, MidiExporter
from voicelead.voicing import Voice, Voicing

CADENCE = [
    Voicing.from_names("C5 G4 E4 C3"),
    Voicing.from_names("B4 G4 D4 G3"),
    Voicing.from_names("C5 G4 E4 C4"),
]


def test_rejects_non_positive_chord_length() -> None:
    with pytest.raises(ValueError):
        MidiExporter(beats_per_chord=0)


def test_voice_tracks_skip_conductor_track() -> None:
    assert VOICE_TRACKS[Voice.SOPRANO] == 1
    assert VOICE_TRACKS[Voice.BASS] == 4
    assert CHOIR_PROGRAM == 52


def test_build_returns_midi_file() -> None:
    midi = MidiExporter(tempo=90).build(CADENCE)
    assert isinstance(midi, MIDIFile)


def test_export_writes_standard_midi_file(tmp_path) -> None:
    out = tmp_path / "cadence.mid"
    MidiExporter().export(CADENCE, str(out))
    data = out.read_bytes()
    assert data.startswith(b"MThd")
    assert b"Soprano" in data
    assert b"Bass" in data
