"""Transition tables: scored edges between the candidates of adjacent chords."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from music21 import key

from voicelead.roman_chord import RomanChord
from voicelead.rule_set import DEFAULT_RULES, RuleSet
from voicelead.voicing import CandidateVoicing

logger = logging.getLogger(__name__)

#: (index in the previous layer, index in the current layer) → edge penalty.
#: Pairs failing a pairwise rule are absent.
TransitionTable = dict[tuple[int, int], int]


def build_transition_table(
    prev_candidates: Sequence[CandidateVoicing],
    curr_candidates: Sequence[CandidateVoicing],
    prev_chord: RomanChord,
    curr_chord: RomanChord,
    k: key.Key,
    rules: RuleSet | None = None,
) -> TransitionTable:
    """
    Score every valid transition between two candidate layers.

    Args:
        prev_candidates: Candidates of chord *i*.
        curr_candidates: Candidates of chord *i + 1*.
        prev_chord:      Chord *i*.
        curr_chord:      Chord *i + 1*.
        k:               Key of the progression.
        rules:           Rule set; ``DEFAULT_RULES`` when omitted.

    Returns:
        TransitionTable holding an entry only for pairs that pass every
        pairwise rule.
    """
    rules = rules or DEFAULT_RULES
    table: TransitionTable = {}

    for i, (prev, _) in enumerate(prev_candidates):
        for j, (curr, _) in enumerate(curr_candidates):
            if rules.first_window_violation(prev, curr, prev_chord, curr_chord, k) is not None:
                continue
            table[(i, j)] = rules.window_penalty(prev, curr, prev_chord, curr_chord, k)

    logger.debug(
        "%s -> %s: %d of %d transitions valid",
        prev_chord,
        curr_chord,
        len(table),
        len(prev_candidates) * len(curr_candidates),
    )
    return table
