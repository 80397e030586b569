"""RuleSet: the ordered catalogue of constraints and scorers the solver iterates."""

from __future__ import annotations

from dataclasses import dataclass, replace

from music21 import key, pitch

from voicelead.constraints import (
    ChordalSeventhResolution,
    CompleteVoicing,
    CorrectBass,
    DirectPerfects,
    EliminatedFifthResolution,
    LeadingToneDoubling,
    LeadingToneResolution,
    MelodicIntervals,
    PairwiseConstraint,
    ParallelPerfects,
    RootPositionDoubling,
    SimilarIntoUnison,
    SingleVoicingConstraint,
    SixFourDoubling,
    Spacing,
    UnequalFifths,
    VoiceRange,
)
from voicelead.roman_chord import RomanChord
from voicelead.scoring import (
    CommonTones,
    MelodicMotion,
    OuterVoiceMotion,
    TransitionScorer,
    UnisonPenalty,
    VoicingScorer,
)
from voicelead.violations import RuleViolationError, Violation
from voicelead.voicing import Voice, Voicing

Rule = SingleVoicingConstraint | PairwiseConstraint | VoicingScorer | TransitionScorer


@dataclass(frozen=True)
class RuleSet:
    """
    Four ordered registries consulted generically by the solver.

    Constraints are checked in order and the first failure is reported, so
    cheap rules that prune the most (range, spacing, bass) come first.

    Attributes:
        single_constraints:   Hard rules on one voicing.
        pairwise_constraints: Hard rules on adjacent voicings.
        single_scorers:       Node penalties.
        pair_scorers:         Edge penalties.
    """

    single_constraints: tuple[SingleVoicingConstraint, ...] = ()
    pairwise_constraints: tuple[PairwiseConstraint, ...] = ()
    single_scorers: tuple[VoicingScorer, ...] = ()
    pair_scorers: tuple[TransitionScorer, ...] = ()

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------

    @classmethod
    def default(cls) -> RuleSet:
        """Common-practice part-writing rules with no node-level penalty."""
        return cls(
            single_constraints=(
                VoiceRange(),
                Spacing(),
                CorrectBass(),
                CompleteVoicing(),
                LeadingToneDoubling(),
                RootPositionDoubling(),
                SixFourDoubling(),
            ),
            pairwise_constraints=(
                ParallelPerfects(),
                UnequalFifths(),
                DirectPerfects(),
                LeadingToneResolution(),
                ChordalSeventhResolution(),
                MelodicIntervals(),
            ),
            pair_scorers=(
                OuterVoiceMotion(),
                MelodicMotion(),
                CommonTones(),
            ),
        )

    @classmethod
    def strict(cls) -> RuleSet:
        """The default rules plus unison avoidance and the V7-I eliminated-fifth restriction."""
        return cls.default().with_rules(
            SimilarIntoUnison(),
            EliminatedFifthResolution(),
            UnisonPenalty(),
        )

    def with_rules(self, *rules: Rule) -> RuleSet:
        """
        Copy of this rule set with ``rules`` appended to their registries.

        Raises:
            TypeError: If an object is neither a constraint nor a scorer.
        """
        single = list(self.single_constraints)
        pairwise = list(self.pairwise_constraints)
        node = list(self.single_scorers)
        edge = list(self.pair_scorers)

        for rule in rules:
            if isinstance(rule, SingleVoicingConstraint):
                single.append(rule)
            elif isinstance(rule, PairwiseConstraint):
                pairwise.append(rule)
            elif isinstance(rule, VoicingScorer):
                node.append(rule)
            elif isinstance(rule, TransitionScorer):
                edge.append(rule)
            else:
                raise TypeError(f"{rule!r} is not a constraint or scorer.")

        return replace(
            self,
            single_constraints=tuple(single),
            pairwise_constraints=tuple(pairwise),
            single_scorers=tuple(node),
            pair_scorers=tuple(edge),
        )

    # ------------------------------------------------------------------
    # Hard constraints
    # ------------------------------------------------------------------

    def first_violation(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> Violation | None:
        for constraint in self.single_constraints:
            violation = constraint.evaluate(voicing, chord, k)
            if violation is not None:
                return violation
        return None

    def first_window_violation(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> Violation | None:
        for constraint in self.pairwise_constraints:
            violation = constraint.evaluate(first, second, first_chord, second_chord, k)
            if violation is not None:
                return violation
        return None

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def node_penalty(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> int:
        """Weighted node penalty, assuming the voicing already passed every hard rule."""
        return sum(scorer.score(voicing, chord, k) for scorer in self.single_scorers)

    def window_penalty(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> int:
        """Weighted edge penalty, assuming the transition already passed every hard rule."""
        return sum(
            scorer.score(first, second, first_chord, second_chord, k)
            for scorer in self.pair_scorers
        )

    def score_single(self, voicing: Voicing, chord: RomanChord, k: key.Key) -> int:
        """
        Validate one voicing and return its node penalty.

        Raises:
            RuleViolationError: Carrying the first failed single-voicing rule.
        """
        violation = self.first_violation(voicing, chord, k)
        if violation is not None:
            raise RuleViolationError(violation)
        return self.node_penalty(voicing, chord, k)

    def score_window(
        self,
        first: Voicing,
        second: Voicing,
        first_chord: RomanChord,
        second_chord: RomanChord,
        k: key.Key,
    ) -> int:
        """
        Validate a transition and return its edge penalty.

        Only the pairwise rules are consulted; each voicing is expected to
        have passed ``score_single`` already.

        Raises:
            RuleViolationError: Carrying the first failed pairwise rule.
        """
        violation = self.first_window_violation(first, second, first_chord, second_chord, k)
        if violation is not None:
            raise RuleViolationError(violation)
        return self.window_penalty(first, second, first_chord, second_chord, k)

    # ------------------------------------------------------------------
    # Registers
    # ------------------------------------------------------------------

    def voice_ranges(self) -> dict[Voice, tuple[pitch.Pitch, pitch.Pitch]]:
        """
        Registers the candidate generator should enumerate.

        Taken from the first ``VoiceRange`` rule; without one, the default
        ranges apply.
        """
        for constraint in self.single_constraints:
            if isinstance(constraint, VoiceRange):
                return dict(constraint.ranges)
        return VoiceRange().ranges


DEFAULT_RULES = RuleSet.default()
