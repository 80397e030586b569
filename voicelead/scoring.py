"""Soft scorers: non-negative penalties ranking valid voicings and transitions."""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from typing import Final

from music21 import key

from voicelead import theory
from voicelead.roman_chord import RomanChord
from voicelead.voicing import Motion, Voice, Voicing, motion_between


class VoicingScorer(ABC):
    """A weighted penalty on a single voicing (a node of the search graph)."""

    weight: int = 1

    @abstractmethod
    def evaluate(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> int:
        """Unweighted penalty for ``voicing``; 0 is best."""

    def score(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> int:
        return self.weight * self.evaluate(voicing, chord, k)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(weight={self.weight})"


class TransitionScorer(ABC):
    """A weighted penalty on the motion between two voicings (an edge)."""

    weight: int = 1

    @abstractmethod
    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> int:
        """Unweighted penalty for moving from ``first`` to ``second``; 0 is best."""

    def score(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> int:
        return self.weight * self.evaluate(first, second, first_chord, second_chord, k)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(weight={self.weight})"


# ── Transition scorers ──────────────────────────────────────────────────────

#: Penalty per motion type between the outer voices.
OUTER_MOTION_PENALTY: Final[dict[Motion, int]] = {
    Motion.OBLIQUE: 0,
    Motion.CONTRARY: 1,
    Motion.SIMILAR: 2,
    Motion.PARALLEL: 4,
}


class OuterVoiceMotion(TransitionScorer):
    """Prefers oblique, then contrary motion between soprano and bass."""

    def __init__(self, weight: int = 2) -> None:
        self.weight = weight

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> int:
        return OUTER_MOTION_PENALTY[motion_between(Voice.SOPRANO, Voice.BASS, first, second)]


def melodic_penalty(semitones: int) -> int:
    """
    Tiered cost of one voice moving by ``semitones`` (either direction).

    Steps are free; thirds cost 1, fourths and tritones 2, a fifth 4 and
    anything wider 8. Compound leaps keep their full size, so a ninth costs
    as much as an octave.
    """
    size = abs(semitones)
    if size <= 2:
        return 0
    if size <= 4:
        return 1
    if size <= 6:
        return 2
    if size == 7:
        return 4
    return 8


class MelodicMotion(TransitionScorer):
    """Sums the per-voice leap penalties of ``melodic_penalty``."""

    def __init__(self, weight: int = 2) -> None:
        self.weight = weight

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> int:
        return sum(
            melodic_penalty(theory.semitones_between(first[voice], second[voice]))
            for voice in Voice
        )


class CommonTones(TransitionScorer):
    """One point for every voice that abandons a tone common to both chords."""

    def __init__(self, weight: int = 1) -> None:
        self.weight = weight

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> int:
        common = first_chord.pitch_class_set(k) & second_chord.pitch_class_set(k)
        if not common:
            return 0

        return sum(
            1
            for voice in Voice
            if first[voice].pitchClass in common
            and first[voice].nameWithOctave != second[voice].nameWithOctave
        )


# ── Voicing scorers ─────────────────────────────────────────────────────────

class UnisonPenalty(VoicingScorer):
    """One point per pair of voices sharing the same note."""

    def __init__(self, weight: int = 3) -> None:
        self.weight = weight

    def evaluate(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> int:
        return sum(
            1
            for upper, lower in itertools.combinations(Voice, 2)
            if voicing[upper].nameWithOctave == voicing[lower].nameWithOctave
        )
