"""Voice roles, SATB voicings and the value types the solver produces."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Final, NamedTuple

from music21 import pitch

from voicelead import theory


class Voice(IntEnum):
    """The four voice roles, ordered from the top of the texture down."""

    SOPRANO = 0
    ALTO = 1
    TENOR = 2
    BASS = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def range(self) -> tuple[pitch.Pitch, pitch.Pitch]:
        """Inclusive (lowest, highest) registered pitch the voice may sing."""
        low, high = VOICE_RANGES[self]
        return pitch.Pitch(low), pitch.Pitch(high)


#: Default inclusive voice ranges in scientific pitch notation.
VOICE_RANGES: Final[dict[Voice, tuple[str, str]]] = {
    Voice.SOPRANO: ("C4", "G5"),
    Voice.ALTO: ("G3", "D5"),
    Voice.TENOR: ("C3", "G4"),
    Voice.BASS: ("E2", "D4"),
}


@dataclass(frozen=True)
class Voicing:
    """
    One registered pitch per voice.

    Construction enforces nothing about the pitches; whether a voicing is
    usable for a chord is decided by the rule set.
    """

    soprano: pitch.Pitch
    alto: pitch.Pitch
    tenor: pitch.Pitch
    bass: pitch.Pitch

    @classmethod
    def from_names(cls, names: str | Sequence[str]) -> Voicing:
        """
        Build a voicing from four pitch names, soprano first.

        Accepts either a whitespace-separated string (``"B-4 E-4 G3 E-3"``) or
        a sequence of names.

        Raises:
            ValueError: If there are not exactly four names or a name has no octave.
        """
        parts = names.split() if isinstance(names, str) else list(names)
        if len(parts) != len(Voice):
            raise ValueError(f"A voicing needs {len(Voice)} pitches, got {len(parts)}: {names!r}")
        return cls(*(theory.parse_pitch(name) for name in parts))

    @property
    def notes(self) -> tuple[pitch.Pitch, pitch.Pitch, pitch.Pitch, pitch.Pitch]:
        return (self.soprano, self.alto, self.tenor, self.bass)

    def __getitem__(self, voice: Voice) -> pitch.Pitch:
        return self.notes[voice]

    def __iter__(self) -> Iterator[pitch.Pitch]:
        return iter(self.notes)

    def with_note(self, voice: Voice, note: pitch.Pitch) -> Voicing:
        """Copy of this voicing with one voice replaced."""
        return replace(self, **{voice.name.lower(): note})

    def pitch_classes(self) -> frozenset[int]:
        return frozenset(note.pitchClass for note in self.notes)

    def names(self) -> tuple[str, ...]:
        return tuple(note.nameWithOctave for note in self.notes)

    def __str__(self) -> str:
        return " ".join(self.names())


class CandidateVoicing(NamedTuple):
    """A voicing that passed every single-voicing constraint, with its node score."""

    voicing: Voicing
    score: int


class Solution(NamedTuple):
    """A complete voice leading: total penalty plus one voicing per chord."""

    score: int
    voicings: tuple[Voicing, ...]


# ── Motion between two voices ───────────────────────────────────────────────

class Motion(Enum):
    OBLIQUE = "oblique"
    CONTRARY = "contrary"
    SIMILAR = "similar"
    PARALLEL = "parallel"


def motion_between(upper: Voice, lower: Voice, first: Voicing, second: Voicing) -> Motion:
    """
    Classify how two voices move from ``first`` to ``second``.

    Oblique when either voice holds its pitch, parallel when both move by
    the same directed interval, otherwise contrary or similar by direction.
    """
    if upper == lower:
        return Motion.OBLIQUE

    upper_move = theory.semitones_between(first[upper], second[upper])
    lower_move = theory.semitones_between(first[lower], second[lower])

    if upper_move == 0 or lower_move == 0:
        return Motion.OBLIQUE
    if (upper_move > 0) != (lower_move > 0):
        return Motion.CONTRARY

    upper_interval = theory.distance(first[upper], second[upper])
    lower_interval = theory.distance(first[lower], second[lower])
    if upper_interval.directedName == lower_interval.directedName:
        return Motion.PARALLEL
    return Motion.SIMILAR
