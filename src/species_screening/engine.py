"""DecisionEngine — walks a ruleset against an answer map.

Pure, synchronous evaluation: one call reads an answer map and a loaded
:class:`Ruleset` and returns one :class:`DecisionResult`.  Nothing is
mutated and no state is kept between calls, so a single engine can be
shared across threads.

Stage overview (evaluation stops at the first stage that terminates):
    1  Early exits         — ``rulesInOrder``; first rule whose ``whenAll`` holds wins
    2  Baseline            — seed score and drivers; never terminates
    3  Unknown penalties   — every matching penalty adds points and one unknown
    4  High-risk triggers  — first trigger with a matching ``whenAny`` terminates
    5  Conditional triggers — first trigger passing all/any/numeric guards terminates
    6  Lower-risk adds     — accumulate only
    7  Default outcome     — always terminates

Each stage is a method from ``(accumulator, answers, ruleset)`` to either
:class:`Continue` (with a new accumulator) or :class:`Terminate` (with the
final result).  Scores are rounded and clamped only when a result is built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from species_screening.evaluator import ConditionMatcher
from species_screening.models.result import DecisionResult
from species_screening.models.ruleset import Driver, Outcome, Ruleset
from species_screening.scoring import (
    ScoreAccumulator,
    clamp_score,
    confidence_for_unknowns,
    risk_band_for_score,
    sort_drivers,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Continue:
    """Stage signal: carry on with the updated accumulator."""

    accumulator: ScoreAccumulator


@dataclass(frozen=True)
class Terminate:
    """Stage signal: evaluation is over; ``result`` is final."""

    result: DecisionResult


StageSignal = Continue | Terminate

Stage = Callable[[ScoreAccumulator, Mapping[str, Any], Ruleset], StageSignal]


class DecisionEngine:
    """Evaluates answer maps against rulesets.

    Args:
        matcher: condition matcher to use; a fresh :class:`ConditionMatcher`
            by default
    """

    def __init__(self, matcher: ConditionMatcher | None = None) -> None:
        self._matcher = matcher or ConditionMatcher()

    def evaluate(self, answers: Mapping[str, Any] | None, ruleset: Ruleset) -> DecisionResult:
        """Run every stage in order and return the first terminal result.

        Args:
            answers: question id -> answer; missing keys mean "not provided"
            ruleset: a validated ruleset (see :func:`parse_ruleset`)

        Returns:
            The decision.  Malformed answers never raise; they only make
            conditions false.
        """
        answers = answers or {}
        stages: Sequence[tuple[str, Stage]] = (
            ("early_exit", self._early_exit),
            ("baseline", self._baseline),
            ("unknown_penalties", self._unknown_penalties),
            ("high_risk_triggers", self._high_risk_triggers),
            ("conditional_triggers", self._conditional_triggers),
            ("lower_risk_adds", self._lower_risk_adds),
        )

        accumulator = ScoreAccumulator()
        for name, stage in stages:
            signal = stage(accumulator, answers, ruleset)
            if isinstance(signal, Terminate):
                logger.debug(
                    "Ruleset %s terminated at %s: %s (score=%d)",
                    ruleset.id, name, signal.result.determination, signal.result.risk_score,
                )
                return signal.result
            accumulator = signal.accumulator

        result = self._default_outcome(accumulator, ruleset)
        logger.debug(
            "Ruleset %s fell through to default outcome: %s (score=%d, unknowns=%d)",
            ruleset.id, result.determination, result.risk_score, result.unknowns,
        )
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _early_exit(
        self, acc: ScoreAccumulator, answers: Mapping[str, Any], ruleset: Ruleset
    ) -> StageSignal:
        """Stage 1: first ``rulesInOrder`` entry whose conjunction holds.

        The rule's own score, unknowns and drivers replace anything the
        scoring pipeline would have produced.
        """
        for rule in ruleset.rules_in_order:
            if self._matcher.matches_all(answers, rule.when_all):
                out = rule.outcome
                early = ScoreAccumulator(
                    score=out.risk_score or 0,
                    unknowns=out.unknowns,
                    drivers=out.drivers,
                )
                return Terminate(
                    self._build_result(early, out, ruleset, out.recommendations)
                )
        return Continue(acc)

    def _baseline(
        self, acc: ScoreAccumulator, answers: Mapping[str, Any], ruleset: Ruleset
    ) -> StageSignal:
        """Stage 2: seed the score and the baseline drivers."""
        seeded = ScoreAccumulator(
            score=ruleset.meta.defaults.baseline_risk,
            unknowns=acc.unknowns,
            drivers=acc.drivers + ruleset.scoring.baseline_drivers,
        )
        return Continue(seeded)

    def _unknown_penalties(
        self, acc: ScoreAccumulator, answers: Mapping[str, Any], ruleset: Ruleset
    ) -> StageSignal:
        """Stage 3: every matching penalty adds its points and one unknown."""
        default_detail = ruleset.meta.defaults.unknown_detail
        for penalty in ruleset.scoring.unknown_penalties:
            if self._matcher.matches(answers, penalty.when):
                acc = acc.with_unknown(
                    Driver(
                        label=penalty.label,
                        points=penalty.points,
                        detail=penalty.detail or default_detail,
                    )
                )
        return Continue(acc)

    def _high_risk_triggers(
        self, acc: ScoreAccumulator, answers: Mapping[str, Any], ruleset: Ruleset
    ) -> StageSignal:
        """Stage 4: first trigger with any matching condition terminates."""
        for trigger in ruleset.scoring.high_risk_triggers:
            if self._matcher.matches_any(answers, trigger.when_any):
                fired = acc.with_driver(
                    Driver(label=trigger.label, points=trigger.add_points, detail=trigger.detail)
                )
                return Terminate(self._trigger_result(fired, trigger.outcome, ruleset))
        return Continue(acc)

    def _conditional_triggers(
        self, acc: ScoreAccumulator, answers: Mapping[str, Any], ruleset: Ruleset
    ) -> StageSignal:
        """Stage 5: first trigger whose all/any/numeric guards pass terminates.

        Empty ``whenAll`` and empty ``whenAny`` both count as passed.
        """
        for trigger in ruleset.scoring.conditional_triggers:
            all_ok = self._matcher.matches_all(answers, trigger.when_all)
            any_ok = not trigger.when_any or self._matcher.matches_any(answers, trigger.when_any)
            numeric_ok = trigger.numeric is None or self._matcher.matches_numeric(
                answers, trigger.numeric
            )
            if all_ok and any_ok and numeric_ok:
                fired = acc.with_driver(
                    Driver(label=trigger.label, points=trigger.add_points, detail=trigger.detail)
                )
                return Terminate(self._trigger_result(fired, trigger.outcome, ruleset))
        return Continue(acc)

    def _lower_risk_adds(
        self, acc: ScoreAccumulator, answers: Mapping[str, Any], ruleset: Ruleset
    ) -> StageSignal:
        """Stage 6: matching rules add points; never terminates."""
        for rule in ruleset.scoring.lower_risk_adds:
            numeric_ok = rule.numeric is None or self._matcher.matches_numeric(answers, rule.numeric)
            if numeric_ok and self._matcher.matches_all(answers, rule.when_all):
                acc = acc.with_driver(
                    Driver(label=rule.label, points=rule.add_points, detail=rule.detail)
                )
        return Continue(acc)

    def _default_outcome(self, acc: ScoreAccumulator, ruleset: Ruleset) -> DecisionResult:
        """Stage 7: nothing terminated; use the ruleset's default outcome."""
        return self._trigger_result(acc, ruleset.scoring.default_outcome, ruleset)

    # ------------------------------------------------------------------
    # Result building
    # ------------------------------------------------------------------

    def _trigger_result(
        self, acc: ScoreAccumulator, outcome: Outcome, ruleset: Ruleset
    ) -> DecisionResult:
        """Result for the scoring path: outcome recommendations, else the defaults."""
        recommendations = outcome.recommendations or ruleset.scoring.default_recommendations
        return self._build_result(acc, outcome, ruleset, recommendations)

    @staticmethod
    def _build_result(
        acc: ScoreAccumulator,
        outcome: Outcome,
        ruleset: Ruleset,
        recommendations: Sequence[str],
    ) -> DecisionResult:
        """Clamp, band and sort — the only place scores are finalised."""
        meta = ruleset.meta
        score = clamp_score(acc.score, meta.risk_score_max)
        return DecisionResult(
            determination=outcome.determination,
            risk_score=score,
            risk_band=risk_band_for_score(score, meta),
            confidence=confidence_for_unknowns(acc.unknowns, meta),
            unknowns=acc.unknowns,
            why_text=outcome.why_text,
            next_action=outcome.next_action,
            recommendations=tuple(recommendations),
            drivers=sort_drivers(acc.drivers),
        )
