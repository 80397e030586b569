"""Tests for the layered-graph search engine and VoiceLeadingSolver."""

import pytest
from music21 import key

from voicelead.check import check_voice_leading
from voicelead.roman_chord import Quality, RomanChord, ScaleDegree
from voicelead.rule_set import RuleSet
from voicelead.search import VoiceLeadingSolver, search, starting_prefix
from voicelead.voicing import Solution, Voicing

E_FLAT = key.Key("E-")
C = key.Key("C")

I = RomanChord.triad(ScaleDegree.I, Quality.MAJOR)
V6 = RomanChord.triad(ScaleDegree.V, Quality.MAJOR, inversion=1)
V = RomanChord.triad(ScaleDegree.V, Quality.MAJOR)

START = Voicing.from_names("B-4 E-4 G3 E-3")


def _flat(solutions: list[Solution]) -> list[tuple[int, tuple[tuple[str, ...], ...]]]:
    return [(s.score, tuple(v.names() for v in s.voicings)) for s in solutions]


def test_empty_progression_yields_nothing() -> None:
    assert search([], E_FLAT) == []
    assert search([], E_FLAT, START) == []


def test_single_chord_with_start_yields_that_voicing() -> None:
    solutions = search([I], E_FLAT, START)
    assert _flat(solutions) == [(0, (START.names(),))]


def test_results_are_sorted_by_score() -> None:
    solutions = search([I, V6, I], E_FLAT, START)
    assert solutions
    scores = [s.score for s in solutions]
    assert scores == sorted(scores)


def test_every_solution_starts_with_the_given_voicing() -> None:
    solutions = search([I, V6, I], E_FLAT, START)
    assert all(s.voicings[0].names() == START.names() for s in solutions)
    assert all(len(s.voicings) == 3 for s in solutions)


def test_solution_scores_match_independent_check() -> None:
    progression = [I, V6, I]
    for solution in search(progression, E_FLAT, START)[:25]:
        assert check_voice_leading(E_FLAT, progression, solution.voicings) == solution.score


def test_search_is_deterministic() -> None:
    first = search([I, V6, I], E_FLAT, START)
    second = search([I, V6, I], E_FLAT, START)
    assert _flat(first) == _flat(second)


def test_invalid_starting_voicing_yields_nothing() -> None:
    wrong_bass = Voicing.from_names("B-4 E-4 G3 G2")
    assert search([I, V6, I], E_FLAT, wrong_bass) == []


def test_starting_prefix_fixes_several_chords() -> None:
    solutions = search([I, V6, I], E_FLAT, START)
    middle = solutions[0].voicings[1]
    fixed = search([I, V6, I], E_FLAT, [START, middle])
    assert fixed
    assert all(s.voicings[1].names() == middle.names() for s in fixed)
    assert solutions[0].score in {s.score for s in fixed}


def test_starting_prefix_longer_than_progression_is_rejected() -> None:
    with pytest.raises(ValueError):
        search([I], E_FLAT, [START, START])


def test_starting_prefix_normalisation() -> None:
    assert starting_prefix(None, 3) == []
    assert starting_prefix(START, 3) == [START]
    assert starting_prefix((START,), 3) == [START]


def test_unconnectable_progression_yields_nothing() -> None:
    # Both voicings are valid alone, but the tenor's leading tone falls to G3.
    start = [Voicing.from_names("D5 G4 B3 G3"), Voicing.from_names("C5 E4 G3 C3")]
    assert search([V, I], C, start) == []


def test_strict_rules_are_honoured() -> None:
    strict = search([I, V6, I], E_FLAT, START, RuleSet.strict())
    default = search([I, V6, I], E_FLAT, START)
    assert len(strict) <= len(default)
    for solution in strict[:25]:
        assert check_voice_leading(E_FLAT, [I, V6, I], solution.voicings, RuleSet.strict()) == solution.score


def test_solver_wraps_search() -> None:
    solver = VoiceLeadingSolver(E_FLAT)
    progression = [I, V6, I]
    every = solver.solve(progression, START)
    assert _flat(solver.solve(progression, START, limit=3)) == _flat(every[:3])

    best = solver.best(progression, START)
    assert best is not None
    assert best.score == every[0].score
    assert solver.check(progression, best.voicings) == best.score


def test_solver_best_without_solutions_is_none() -> None:
    solver = VoiceLeadingSolver(E_FLAT)
    assert solver.best([I], Voicing.from_names("B-4 E-4 G3 G2")) is None
