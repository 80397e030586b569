"""Validate and score a fully specified voice leading."""

from __future__ import annotations

from collections.abc import Sequence

from music21 import key

from voicelead.roman_chord import RomanChord
from voicelead.rule_set import DEFAULT_RULES, RuleSet
from voicelead.violations import Violation, ViolationKind, VoiceLeadingError
from voicelead.voicing import Voicing


def check_voice_leading(
    k: key.Key,
    progression: Sequence[RomanChord],
    voicings: Sequence[Voicing],
    rules: RuleSet | None = None,
) -> int:
    """
    Check every rule along a progression and return its total penalty.

    Each voicing is checked against the single-voicing rules before the
    transition into it, so the reported location is always the earliest
    failing chord.

    Args:
        k:           Key of the progression.
        progression: One chord per position.
        voicings:    One voicing per chord.
        rules:       Rule set to apply; ``DEFAULT_RULES`` when omitted.

    Returns:
        Sum of the node and edge penalties.

    Raises:
        VoiceLeadingError: With the first violation and its location: the
            chord index for single-voicing rules, the index of the first chord
            of the pair for pairwise rules, and 0 for mismatched lengths.
    """
    rules = rules or DEFAULT_RULES

    if len(progression) != len(voicings):
        raise VoiceLeadingError(Violation(ViolationKind.MISMATCHED_SIZES), 0)

    total = 0
    for index, (chord, voicing) in enumerate(zip(progression, voicings)):
        violation = rules.first_violation(voicing, chord, k)
        if violation is not None:
            raise VoiceLeadingError(violation, index)
        total += rules.node_penalty(voicing, chord, k)

        if index == 0:
            continue

        previous = index - 1
        violation = rules.first_window_violation(
            voicings[previous], voicing, progression[previous], chord, k
        )
        if violation is not None:
            raise VoiceLeadingError(violation, previous)
        total += rules.window_penalty(voicings[previous], voicing, progression[previous], chord, k)

    return total
