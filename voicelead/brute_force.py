"""Reference enumerator: the full Cartesian product, re-checked from scratch.

Used only to cross-check ``search``; it shares no tables or pruning with it
and is far too slow for more than a few chords.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Sequence

from music21 import key

from voicelead.candidates import generate_candidate_voicings
from voicelead.check import check_voice_leading
from voicelead.roman_chord import RomanChord
from voicelead.rule_set import DEFAULT_RULES, RuleSet
from voicelead.search import StartingVoicing, starting_prefix
from voicelead.violations import VoiceLeadingError
from voicelead.voicing import Solution, Voicing

logger = logging.getLogger(__name__)


def brute_force_search(
    progression: Sequence[RomanChord],
    k: key.Key,
    starting_voicing: StartingVoicing = None,
    rules: RuleSet | None = None,
) -> list[Solution]:
    """Same contract as ``search``."""
    if not progression:
        return []

    rules = rules or DEFAULT_RULES
    prefix = starting_prefix(starting_voicing, len(progression))

    options: list[list[Voicing]] = []
    for index, chord in enumerate(progression):
        if index < len(prefix):
            options.append([prefix[index]])
        else:
            options.append([c.voicing for c in generate_candidate_voicings(chord, k, rules)])

    solutions = []
    for voicings in itertools.product(*options):
        try:
            score = check_voice_leading(k, progression, voicings, rules)
        except VoiceLeadingError:
            continue
        solutions.append(Solution(score, tuple(voicings)))

    solutions.sort(key=lambda solution: solution.score)
    logger.debug("Brute force kept %d solution(s)", len(solutions))
    return solutions
