"""Hard part-writing constraints: single-voicing and pairwise predicates."""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping

from music21 import key, pitch

from voicelead import theory
from voicelead.roman_chord import Quality, RomanChord, ScaleDegree
from voicelead.violations import Violation, ViolationKind
from voicelead.voicing import VOICE_RANGES, Motion, Voice, Voicing, motion_between

# ── Helpers ─────────────────────────────────────────────────────────────────


def _voices_with_pitch_class(voicing: Voicing, pitch_class: int) -> tuple[Voice, ...]:
    return tuple(voice for voice in Voice if voicing[voice].pitchClass == pitch_class)


def _voice_pairs() -> Iterator[tuple[Voice, Voice]]:
    """Every (upper, lower) pair of distinct voices, in voice order."""
    return itertools.combinations(Voice, 2)


def _same_note(first: pitch.Pitch, second: pitch.Pitch) -> bool:
    return first.nameWithOctave == second.nameWithOctave


# ── Abstract bases ──────────────────────────────────────────────────────────

class SingleVoicingConstraint(ABC):
    """A hard rule judged on one voicing of one chord."""

    @abstractmethod
    def evaluate(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> Violation | None:
        """
        Check one voicing.

        Args:
            voicing: The four registered pitches.
            chord:   The chord the voicing is meant to realise.
            k:       The key of the progression.

        Returns:
            None when the rule holds, otherwise the Violation naming the
            offending voice(s).
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PairwiseConstraint(ABC):
    """A hard rule judged on the motion between two adjacent voicings."""

    @abstractmethod
    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> Violation | None:
        """
        Check the transition ``first`` → ``second``.

        Returns:
            None when the rule holds, otherwise the Violation.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


# ── Single-voicing constraints ──────────────────────────────────────────────

class VoiceRange(SingleVoicingConstraint):
    """
    Every voice sits inside its register.

    Ranges are inclusive and given as pitch names per voice, defaulting to
    ``VOICE_RANGES`` (Soprano C4-G5, Alto G3-D5, Tenor C3-G4, Bass E2-D4).
    """

    def __init__(self, ranges: Mapping[Voice, tuple[str, str]] | None = None) -> None:
        """
        Args:
            ranges: Optional per-voice overrides of the default ranges.

        Raises:
            ValueError: If a range's low pitch lies above its high pitch.
        """
        merged = dict(VOICE_RANGES)
        if ranges is not None:
            merged.update(ranges)

        self.ranges: dict[Voice, tuple[pitch.Pitch, pitch.Pitch]] = {}
        for voice, (low_name, high_name) in merged.items():
            low, high = theory.parse_pitch(low_name), theory.parse_pitch(high_name)
            if low.ps > high.ps:
                raise ValueError(f"{voice.label} range {low_name}-{high_name} is inverted.")
            self.ranges[voice] = (low, high)

    def contains(self, voice: Voice, note: pitch.Pitch) -> bool:
        low, high = self.ranges[voice]
        return low.ps <= note.ps <= high.ps

    def evaluate(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> Violation | None:
        for voice in Voice:
            if not self.contains(voice, voicing[voice]):
                return Violation(ViolationKind.OUT_OF_RANGE, (voice,))
        return None

    def __repr__(self) -> str:
        spans = ", ".join(
            f"{voice.label}={low.nameWithOctave}-{high.nameWithOctave}"
            for voice, (low, high) in self.ranges.items()
        )
        return f"VoiceRange({spans})"


class Spacing(SingleVoicingConstraint):
    """
    Adjacent voices stay in order and within their maximum gap.

    Soprano-Alto and Alto-Tenor may be at most ``upper_limit`` semitones apart
    (an octave by default), Tenor-Bass at most ``bass_limit`` (a major tenth).
    A lower voice sounding above its neighbour is a crossing and also fails.
    """

    def __init__(self, upper_limit: int = 12, bass_limit: int = 16) -> None:
        if upper_limit < 0 or bass_limit < 0:
            raise ValueError("Spacing limits must be non-negative.")
        self.upper_limit = upper_limit
        self.bass_limit = bass_limit

    def _limits(self) -> tuple[tuple[Voice, Voice, int], ...]:
        return (
            (Voice.SOPRANO, Voice.ALTO, self.upper_limit),
            (Voice.ALTO, Voice.TENOR, self.upper_limit),
            (Voice.TENOR, Voice.BASS, self.bass_limit),
        )

    def evaluate(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> Violation | None:
        for upper, lower, limit in self._limits():
            gap = theory.semitones_between(voicing[lower], voicing[upper])
            if not 0 <= gap <= limit:
                return Violation(
                    ViolationKind.INVALID_SPACING,
                    (upper, lower),
                    theory.distance(voicing[lower], voicing[upper]),
                )
        return None

    def __repr__(self) -> str:
        return f"Spacing(upper_limit={self.upper_limit}, bass_limit={self.bass_limit})"


class CompleteVoicing(SingleVoicingConstraint):
    """
    The voicing uses exactly the chord's pitch classes.

    The fifth may be left out of a major or minor triad (no seventh) when
    ``allow_eliminated_fifth`` is set; sevenths, diminished and augmented
    triads must always be complete.
    """

    def __init__(self, allow_eliminated_fifth: bool = True) -> None:
        self.allow_eliminated_fifth = allow_eliminated_fifth

    @staticmethod
    def may_eliminate_fifth(chord: RomanChord) -> bool:
        return not chord.has_seventh and chord.triad_quality not in (
            Quality.DIMINISHED,
            Quality.AUGMENTED,
        )

    def evaluate(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> Violation | None:
        tones = chord.chord_tones(k)
        full = frozenset(tone.pitchClass for tone in tones)
        used = voicing.pitch_classes()

        if used == full:
            return None
        if (
            self.allow_eliminated_fifth
            and self.may_eliminate_fifth(chord)
            and used == full - {tones[2].pitchClass}
        ):
            return None
        return Violation(ViolationKind.INCOMPLETE_VOICING)

    def __repr__(self) -> str:
        return f"CompleteVoicing(allow_eliminated_fifth={self.allow_eliminated_fifth})"


class CorrectBass(SingleVoicingConstraint):
    """The bass sings the chord tone the inversion calls for."""

    def evaluate(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> Violation | None:
        if voicing.bass.pitchClass != chord.bass_pitch(k).pitchClass:
            return Violation(ViolationKind.INVALID_BASS, (Voice.BASS,))
        return None


class LeadingToneDoubling(SingleVoicingConstraint):
    """Neither the leading tone nor the chordal seventh may be doubled."""

    def evaluate(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> Violation | None:
        restricted = [theory.leading_tone(k).pitchClass]
        if chord.has_seventh:
            restricted.append(chord.chord_tones(k)[3].pitchClass)

        for pitch_class in restricted:
            voices = _voices_with_pitch_class(voicing, pitch_class)
            if len(voices) > 1:
                return Violation(ViolationKind.ILLEGAL_DOUBLING, voices)
        return None


class RootPositionDoubling(SingleVoicingConstraint):
    """
    Root-position triads double the root.

    A triad built on the leading tone is exempt, since its root may never
    be doubled.
    """

    def evaluate(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> Violation | None:
        if chord.inversion != 0 or chord.has_seventh:
            return None

        root = chord.root(k).pitchClass
        if root == theory.leading_tone(k).pitchClass:
            return None

        if len(_voices_with_pitch_class(voicing, root)) < 2:
            return Violation(ViolationKind.ILLEGAL_DOUBLING, (Voice.BASS,))
        return None


class SixFourDoubling(SingleVoicingConstraint):
    """Second-inversion triads double the bass."""

    def evaluate(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> Violation | None:
        if chord.inversion != 2 or chord.has_seventh:
            return None

        bass = chord.bass_pitch(k).pitchClass
        if len(_voices_with_pitch_class(voicing, bass)) < 2:
            return Violation(ViolationKind.ILLEGAL_DOUBLING, (Voice.BASS,))
        return None


# ── Pairwise constraints ────────────────────────────────────────────────────

#: Harmonic intervals (semitones mod 12) that may not be approached in parallel.
PERFECT_CONSONANCES = frozenset({0, 7})


class ParallelPerfects(PairwiseConstraint):
    """
    No two voices keep the same perfect fifth or octave (unison) while both move.

    Compound intervals reduce to their simple form, so a fifth moving to a
    twelfth is still parallel, as are fifths and octaves by contrary motion.
    """

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> Violation | None:
        for upper, lower in _voice_pairs():
            if _same_note(first[upper], second[upper]) or _same_note(first[lower], second[lower]):
                continue

            before = theory.semitones_between(first[lower], first[upper]) % theory.SEMITONES_PER_OCTAVE
            after = theory.semitones_between(second[lower], second[upper]) % theory.SEMITONES_PER_OCTAVE

            if before == after and before in PERFECT_CONSONANCES:
                return Violation(
                    ViolationKind.ILLEGAL_PARALLEL,
                    (upper, lower),
                    theory.distance(second[lower], second[upper]),
                )
        return None


class UnequalFifths(PairwiseConstraint):
    """No voice pair moves from a perfect to a diminished fifth or back."""

    SHAPES = frozenset({("P5", "d5"), ("d5", "P5")})

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> Violation | None:
        for upper, lower in _voice_pairs():
            before = theory.distance(first[lower], first[upper])
            after = theory.distance(second[lower], second[upper])
            if (before.simpleName, after.simpleName) in self.SHAPES:
                return Violation(ViolationKind.UNEQUAL_FIFTHS, (upper, lower), after)
        return None


class DirectPerfects(PairwiseConstraint):
    """
    The soprano and a lower voice may only reach a perfect fifth or octave by
    similar motion when the soprano moves by step.
    """

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> Violation | None:
        soprano_move = theory.semitones_between(first.soprano, second.soprano)
        if soprano_move == 0:
            return None
        soprano_step = theory.is_step(theory.distance(first.soprano, second.soprano))

        for lower in (Voice.ALTO, Voice.TENOR, Voice.BASS):
            lower_move = theory.semitones_between(first[lower], second[lower])
            if lower_move == 0 or (lower_move > 0) != (soprano_move > 0):
                continue

            arrival = theory.distance(second[lower], second.soprano)
            if theory.is_perfect_fifth_or_octave(arrival) and not soprano_step:
                return Violation(ViolationKind.DIRECT_FIFTHS_OR_OCTAVES, (Voice.SOPRANO, lower), arrival)
        return None


class LeadingToneResolution(PairwiseConstraint):
    """
    Into a tonic chord, every voice on the leading tone rises a semitone to the tonic.

    Only keys whose (possibly raised) seventh degree lies a minor second under
    the tonic are affected. Leaving a leading-tone seventh chord in first
    inversion, the soprano may instead fall to the dominant.
    """

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> Violation | None:
        if second_chord.degree != ScaleDegree.I or not theory.has_leading_tone(k):
            return None

        tonic = k.tonic.pitchClass
        dominant = theory.scale_pitch(k, 5).pitchClass
        soprano_may_fall = (
            first_chord.degree == ScaleDegree.VII
            and first_chord.has_seventh
            and first_chord.inversion == 1
        )

        for voice in _voices_with_pitch_class(first, theory.leading_tone(k).pitchClass):
            move = theory.semitones_between(first[voice], second[voice])
            if move == 1 and second[voice].pitchClass == tonic:
                continue
            if (
                soprano_may_fall
                and voice == Voice.SOPRANO
                and move < 0
                and second[voice].pitchClass == dominant
            ):
                continue
            return Violation(
                ViolationKind.LEADING_TONE_NOT_RESOLVED,
                (voice,),
                theory.distance(first[voice], second[voice]),
            )
        return None


class ChordalSeventhResolution(PairwiseConstraint):
    """A voice holding the chord's seventh stays put or falls by step."""

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> Violation | None:
        if not first_chord.has_seventh:
            return None

        seventh = first_chord.chord_tones(k)[3].pitchClass
        for voice in _voices_with_pitch_class(first, seventh):
            move = theory.semitones_between(first[voice], second[voice])
            motion = theory.distance(first[voice], second[voice])
            if move == 0 or (move < 0 and theory.is_step(motion)):
                continue
            return Violation(ViolationKind.CHORDAL_SEVENTH_NOT_RESOLVED, (voice,), motion)
        return None


class MelodicIntervals(PairwiseConstraint):
    """No augmented leaps, and no diminished ones other than a diminished fifth."""

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> Violation | None:
        for voice in Voice:
            if _same_note(first[voice], second[voice]):
                continue

            motion = theory.distance(first[voice], second[voice])
            if theory.is_augmented(motion) or (theory.is_diminished(motion) and motion.name != "d5"):
                return Violation(ViolationKind.INVALID_MELODIC_INTERVAL, (voice,), motion)
        return None


class SimilarIntoUnison(PairwiseConstraint):
    """Two voices may not arrive on the same note by similar motion."""

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> Violation | None:
        for upper, lower in _voice_pairs():
            if not _same_note(second[upper], second[lower]):
                continue
            if motion_between(upper, lower, first, second) is Motion.SIMILAR:
                return Violation(ViolationKind.SIMILAR_INTO_UNISON, (upper, lower))
        return None


class EliminatedFifthResolution(PairwiseConstraint):
    """
    A fifth-less voicing is only accepted for a root-position I that follows a
    root-position V7.

    Stricter companion to ``CompleteVoicing``, which on its own admits a
    missing fifth in any major or minor triad.
    """

    def evaluate(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> Violation | None:
        if len(second.pitch_classes()) >= len(second_chord):
            return None

        after_root_v7 = (
            first_chord.degree == ScaleDegree.V
            and first_chord.has_seventh
            and first_chord.inversion == 0
        )
        if after_root_v7 and second_chord.degree == ScaleDegree.I and second_chord.inversion == 0:
            return None
        return Violation(ViolationKind.INCOMPLETE_VOICING)
