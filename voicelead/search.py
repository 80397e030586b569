"""
Search engine: exhaustive enumeration of voice leadings over a layered graph.

Each chord of the progression is a layer whose nodes are its candidate
voicings; edges come from the transition tables. Every complete path is a
Solution, and solutions are returned sorted by total penalty.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from music21 import key

from voicelead import theory
from voicelead.candidates import generate_candidate_voicings
from voicelead.check import check_voice_leading
from voicelead.roman_chord import RomanChord
from voicelead.rule_set import DEFAULT_RULES, RuleSet
from voicelead.transitions import TransitionTable, build_transition_table
from voicelead.voicing import CandidateVoicing, Solution, Voicing

logger = logging.getLogger(__name__)

StartingVoicing = Voicing | Sequence[Voicing] | None

#: Successor lists per layer: successors[i][a] = [(b, edge penalty), ...].
Successors = list[list[list[tuple[int, int]]]]


def starting_prefix(starting_voicing: StartingVoicing, length: int) -> list[Voicing]:
    """
    Normalise a starting voicing argument to the list of fixed leading voicings.

    Raises:
        ValueError: If more voicings are fixed than the progression has chords.
    """
    if starting_voicing is None:
        return []
    if isinstance(starting_voicing, Voicing):
        prefix = [starting_voicing]
    else:
        prefix = list(starting_voicing)
    if length and len(prefix) > length:
        raise ValueError(
            f"{len(prefix)} starting voicings were given for a progression of {length} chords."
        )
    return prefix


def _layer(
    index: int,
    chord: RomanChord,
    k: key.Key,
    prefix: list[Voicing],
    rules: RuleSet,
) -> list[CandidateVoicing]:
    if index >= len(prefix):
        return generate_candidate_voicings(chord, k, rules)

    fixed = prefix[index]
    violation = rules.first_violation(fixed, chord, k)
    if violation is not None:
        logger.debug("Starting voicing %s rejected for %s: %s", fixed, chord, violation)
        return []
    return [CandidateVoicing(fixed, rules.node_penalty(fixed, chord, k))]


def _successors(layers: list[list[CandidateVoicing]], tables: list[TransitionTable]) -> Successors:
    """
    Adjacency lists with dead ends pruned.

    Walking back from the last layer, a node keeps only the edges into nodes
    that still reach the end, so the depth-first pass never backtracks out of
    a dead branch.
    """
    last = len(layers) - 1
    reaches_end = [[False] * len(layer) for layer in layers]
    reaches_end[last] = [True] * len(layers[last])

    successors: Successors = [[[] for _ in layer] for layer in layers]
    for i in range(last - 1, -1, -1):
        for (a, b), weight in tables[i].items():
            if reaches_end[i + 1][b]:
                successors[i][a].append((b, weight))
                reaches_end[i][a] = True
    return successors


def search(
    progression: Sequence[RomanChord],
    k: key.Key,
    starting_voicing: StartingVoicing = None,
    rules: RuleSet | None = None,
) -> list[Solution]:
    """
    Enumerate every valid voice leading of ``progression``, smoothest first.

    Args:
        progression:      Chords to voice, in order.
        k:                Key of the progression.
        starting_voicing: A voicing fixing the first chord, or a sequence of
                          voicings fixing the first chords. A fixed voicing
                          that breaks a single-voicing rule leaves no solutions.
        rules:            Rule set; ``DEFAULT_RULES`` when omitted.

    Returns:
        Every Solution, sorted ascending by score. Ties keep generation order
        (candidate order per layer, earlier layers varying slowest). Empty for
        an empty progression or when no path survives.

    Raises:
        ValueError: If more starting voicings are given than there are chords.
    """
    if not progression:
        return []

    rules = rules or DEFAULT_RULES
    prefix = starting_prefix(starting_voicing, len(progression))

    layers = []
    for index, chord in enumerate(progression):
        layer = _layer(index, chord, k, prefix, rules)
        if not layer:
            logger.debug("No candidates for chord %d (%s); nothing to search", index, chord)
            return []
        layers.append(layer)

    tables = [
        build_transition_table(layers[i], layers[i + 1], progression[i], progression[i + 1], k, rules)
        for i in range(len(layers) - 1)
    ]
    successors = _successors(layers, tables)

    solutions: list[Solution] = []
    path: list[int] = []
    last = len(layers) - 1

    def visit(layer: int, node: int, score: int) -> None:
        path.append(node)
        score += layers[layer][node].score
        if layer == last:
            voicings = tuple(layers[i][n].voicing for i, n in enumerate(path))
            solutions.append(Solution(score, voicings))
        else:
            for successor, weight in successors[layer][node]:
                visit(layer + 1, successor, score + weight)
        path.pop()

    for node in range(len(layers[0])):
        visit(0, node, 0)

    solutions.sort(key=lambda solution: solution.score)
    logger.debug(
        "%d chord(s) in %s: %d solution(s)",
        len(progression),
        theory.key_label(k),
        len(solutions),
    )
    return solutions


class VoiceLeadingSolver:
    """Binds a key and a rule set for repeated solving and checking."""

    def __init__(self, k: key.Key, rules: RuleSet | None = None) -> None:
        self.key = k
        self.rules = rules or DEFAULT_RULES

    def candidates(self, chord: RomanChord) -> list[CandidateVoicing]:
        return generate_candidate_voicings(chord, self.key, self.rules)

    def solve(
        self,
        progression: Sequence[RomanChord],
        starting_voicing: StartingVoicing = None,
        limit: int | None = None,
    ) -> list[Solution]:
        """All solutions, or only the ``limit`` best when given."""
        solutions = search(progression, self.key, starting_voicing, self.rules)
        return solutions if limit is None else solutions[:limit]

    def best(
        self,
        progression: Sequence[RomanChord],
        starting_voicing: StartingVoicing = None,
    ) -> Solution | None:
        solutions = self.solve(progression, starting_voicing, limit=1)
        return solutions[0] if solutions else None

    def check(self, progression: Sequence[RomanChord], voicings: Sequence[Voicing]) -> int:
        """Score a given voice leading; raises VoiceLeadingError on the first broken rule."""
        return check_voice_leading(self.key, progression, voicings, self.rules)
