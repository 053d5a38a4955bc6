"""Result-shaping helpers: score clamping, banding and driver ordering.

Also defines :class:`ScoreAccumulator`, the immutable running state that
the engine threads through its scoring stages.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable

from species_screening.models.ruleset import Driver, RulesetMeta


def clamp_score(value: float | None, ceiling: int) -> int:
    """Round half-up to an integer and clamp into ``[0, ceiling]``.

    ``None`` counts as 0.
    """
    rounded = math.floor((value or 0) + 0.5)
    return max(0, min(ceiling, rounded))


def confidence_for_unknowns(unknowns: int, meta: RulesetMeta) -> str:
    """First confidence band whose ``max_unknowns`` covers the count.

    Bands are stored in ascending order; a count above every band falls
    through to ``meta.fallback_confidence``.
    """
    for band in meta.confidence_by_unknowns:
        if unknowns <= band.max_unknowns:
            return band.label
    return meta.fallback_confidence


def risk_band_for_score(score: float, meta: RulesetMeta) -> str:
    """First risk band (highest ``min_score`` first) the score reaches."""
    for band in meta.risk_bands:
        if score >= band.min_score:
            return band.label
    return meta.fallback_risk_band


def sort_drivers(drivers: Iterable[Driver]) -> tuple[Driver, ...]:
    """Descending points; ``sorted`` is stable so ties keep their order."""
    return tuple(sorted(drivers, key=lambda d: d.points, reverse=True))


@dataclass(frozen=True)
class ScoreAccumulator:
    """Running score, unknowns count and drivers for the scoring stages.

    Each ``with_*`` method returns a new accumulator; instances are never
    mutated.
    """

    score: float = 0
    unknowns: int = 0
    drivers: tuple[Driver, ...] = ()

    def with_driver(self, driver: Driver) -> ScoreAccumulator:
        """Add the driver's points to the score and record it."""
        return replace(
            self,
            score=self.score + driver.points,
            drivers=self.drivers + (driver,),
        )

    def with_unknown(self, driver: Driver) -> ScoreAccumulator:
        """Like :meth:`with_driver`, and count one more unknown."""
        return replace(self.with_driver(driver), unknowns=self.unknowns + 1)
