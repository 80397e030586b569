"""Typed rule failures and the exceptions that carry them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from music21 import interval

from voicelead.voicing import Voice


class ViolationKind(Enum):
    MISMATCHED_SIZES = "mismatched sizes"
    OUT_OF_RANGE = "out of range"
    INVALID_SPACING = "invalid spacing"
    INCOMPLETE_VOICING = "incomplete voicing"
    INVALID_BASS = "invalid bass"
    ILLEGAL_DOUBLING = "illegal doubling"
    ILLEGAL_PARALLEL = "illegal parallel"
    UNEQUAL_FIFTHS = "unequal fifths"
    DIRECT_FIFTHS_OR_OCTAVES = "direct fifths or octaves"
    LEADING_TONE_NOT_RESOLVED = "leading tone not resolved"
    CHORDAL_SEVENTH_NOT_RESOLVED = "chordal seventh not resolved"
    INVALID_MELODIC_INTERVAL = "invalid melodic interval"
    SIMILAR_INTO_UNISON = "similar motion into unison"


@dataclass(frozen=True)
class Violation:
    """
    A single failed hard constraint.

    Attributes:
        kind:     Which rule failed.
        voices:   The voice or voice pair implicated, upper voice first.
        interval: The offending interval where the rule is about one.
    """

    kind: ViolationKind
    voices: tuple[Voice, ...] = ()
    interval: interval.Interval | None = None

    @property
    def message(self) -> str:
        names = [voice.label for voice in self.voices]
        ivl = self.interval.niceName.lower() if self.interval is not None else "an interval"
        kind = self.kind

        if kind is ViolationKind.MISMATCHED_SIZES:
            return "The progression and voicings were different lengths"
        if kind is ViolationKind.OUT_OF_RANGE:
            return f"The {names[0]} part was out of range"
        if kind is ViolationKind.INVALID_SPACING:
            return f"There was an invalid spacing of {ivl} between {names[0]} and {names[1]}"
        if kind is ViolationKind.INCOMPLETE_VOICING:
            return "The chord was not fully voiced"
        if kind is ViolationKind.INVALID_BASS:
            return "The bass note was incorrect"
        if kind is ViolationKind.ILLEGAL_DOUBLING:
            return f"An invalid note was doubled ({', '.join(names)})"
        if kind is ViolationKind.ILLEGAL_PARALLEL:
            return f"There was a parallel {ivl} between {names[0]} and {names[1]}"
        if kind is ViolationKind.UNEQUAL_FIFTHS:
            return f"There were unequal fifths between {names[0]} and {names[1]}"
        if kind is ViolationKind.DIRECT_FIFTHS_OR_OCTAVES:
            return f"There were direct fifths or octaves between {names[0]} and {names[1]}"
        if kind is ViolationKind.LEADING_TONE_NOT_RESOLVED:
            return f"The leading tone in {names[0]} was not resolved"
        if kind is ViolationKind.CHORDAL_SEVENTH_NOT_RESOLVED:
            return f"The chordal seventh in {names[0]} was not resolved"
        if kind is ViolationKind.INVALID_MELODIC_INTERVAL:
            return f"There was an invalid melodic interval of {ivl} in {names[0]}"
        return f"Both {names[0]} and {names[1]} moved to a unison by similar motion"

    def __str__(self) -> str:
        return self.message


class RuleViolationError(Exception):
    """Raised by ``score_single``/``score_window`` when a hard constraint fails."""

    def __init__(self, violation: Violation) -> None:
        super().__init__(violation.message)
        self.violation = violation


class VoiceLeadingError(Exception):
    """
    A violation located within a progression.

    ``location`` is the chord index for single-voicing rules and the index of
    the first chord of the pair for pairwise rules.
    """

    def __init__(self, violation: Violation, location: int) -> None:
        super().__init__(f"Error in chord {location}: {violation.message}")
        self.violation = violation
        self.location = location

    @property
    def kind(self) -> ViolationKind:
        return self.violation.kind
