"""Candidate generator: every voicing of a chord that passes the single-voicing rules."""

from __future__ import annotations

import itertools
import logging

from music21 import key, pitch

from voicelead import theory
from voicelead.roman_chord import RomanChord
from voicelead.rule_set import DEFAULT_RULES, RuleSet
from voicelead.voicing import CandidateVoicing, Voice, Voicing

logger = logging.getLogger(__name__)


def notes_in_range(
    tones: list[pitch.Pitch],
    low: pitch.Pitch,
    high: pitch.Pitch,
) -> list[pitch.Pitch]:
    """
    Every registered placement of ``tones`` between ``low`` and ``high`` inclusive.

    Ordered by chord tone first, then by octave, so the result is stable for
    a given chord and range.
    """
    notes = []
    for tone in tones:
        # A spelled pitch like B#3 sounds in the octave above its letter's octave.
        for octave in range(low.octave - 1, high.octave + 2):
            note = theory.in_octave(tone, octave)
            if low.ps <= note.ps <= high.ps:
                notes.append(note)
    return notes


def generate_candidate_voicings(
    chord: RomanChord,
    k: key.Key,
    rules: RuleSet | None = None,
) -> list[CandidateVoicing]:
    """
    Enumerate the valid voicings of ``chord`` in ``k`` with their node scores.

    Assignments are generated soprano-major (soprano varies slowest, bass
    fastest) over each voice's in-range chord tones, and kept in that order.

    Args:
        chord: Chord to voice.
        k:     Key the chord is realised in.
        rules: Rule set; ``DEFAULT_RULES`` when omitted.

    Returns:
        CandidateVoicing list; empty when nothing satisfies the rules.
    """
    rules = rules or DEFAULT_RULES
    tones = chord.chord_tones(k)
    ranges = rules.voice_ranges()
    per_voice = [notes_in_range(tones, *ranges[voice]) for voice in Voice]

    candidates = []
    examined = 0
    for notes in itertools.product(*per_voice):
        examined += 1
        voicing = Voicing(*notes)
        if rules.first_violation(voicing, chord, k) is not None:
            continue
        candidates.append(CandidateVoicing(voicing, rules.node_penalty(voicing, chord, k)))

    logger.debug(
        "%s in %s: %d of %d assignments are valid voicings",
        chord,
        theory.key_label(k),
        len(candidates),
        examined,
    )
    return candidates
