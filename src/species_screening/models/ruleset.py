"""Pydantic models for the ruleset document.

A ruleset has three sections plus an optional presentation section:

  meta          — score ceiling, confidence bands, risk bands, defaults
  rulesInOrder  — early-exit rules, evaluated top to bottom
  scoring       — the staged additive pipeline used when no early exit fires
  report        — presentation hints for :class:`ReportBuilder` (ignored by the engine)

Keys in the document are camelCase; the models expose snake_case
attributes with camelCase aliases.  Every model is frozen so that a
loaded ruleset can be shared by concurrent evaluations.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from species_screening.constants import (
    DEFAULT_FALLBACK_CONFIDENCE,
    DEFAULT_FALLBACK_RISK_BAND,
    DEFAULT_MAX_DRIVERS,
    DEFAULT_MAX_RECOMMENDATIONS,
    DEFAULT_RISK_SCORE_MAX,
    DEFAULT_UNKNOWN_DETAIL,
)

from .condition import Condition, NumericCondition


class _RulesetModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared building blocks
# ---------------------------------------------------------------------------

class Driver(_RulesetModel):
    """One scored reason contributing to (or against) the risk score."""

    label: str
    points: int = 0
    detail: str = ""


class Outcome(_RulesetModel):
    """Terminal payload produced by a matching rule or trigger.

    ``risk_score`` is only meaningful on early-exit rules, where it replaces
    the running score; ``unknowns`` likewise feeds the confidence table for
    early exits only.
    """

    determination: str = Field(min_length=1)
    risk_score: Optional[float] = Field(default=None, alias="riskScore")
    unknowns: int = Field(default=0, ge=0)
    why_text: str = Field(default="", alias="whyText")
    next_action: str = Field(default="", alias="nextAction")
    recommendations: Tuple[str, ...] = ()
    drivers: Tuple[Driver, ...] = ()


# ---------------------------------------------------------------------------
# meta
# ---------------------------------------------------------------------------

class ConfidenceBand(_RulesetModel):
    """``unknowns <= max_unknowns`` maps to ``label``."""

    max_unknowns: int = Field(alias="maxUnknowns", ge=0)
    label: str


class RiskBand(_RulesetModel):
    """``score >= min_score`` maps to ``label``."""

    min_score: float = Field(alias="min")
    label: str


class Defaults(_RulesetModel):
    baseline_risk: float = Field(default=0, alias="baselineRisk")
    unknown_detail: str = Field(default=DEFAULT_UNKNOWN_DETAIL, alias="unknownDetail")


class RulesetMeta(_RulesetModel):
    """Scoring bounds and label tables.

    Confidence bands are kept in ascending ``max_unknowns`` order and risk
    bands in descending ``min_score`` order regardless of how the document
    lists them, so lookups can take the first match.
    """

    id: Optional[str] = None
    title: Optional[str] = None
    species: Optional[str] = None
    version: Optional[str] = None
    risk_score_max: int = Field(default=DEFAULT_RISK_SCORE_MAX, alias="riskScoreMax", ge=0)
    confidence_by_unknowns: Tuple[ConfidenceBand, ...] = Field(
        default=(), alias="confidenceByUnknowns"
    )
    fallback_confidence: str = Field(
        default=DEFAULT_FALLBACK_CONFIDENCE, alias="fallbackConfidence"
    )
    risk_bands: Tuple[RiskBand, ...] = Field(default=(), alias="riskBands")
    fallback_risk_band: str = Field(
        default=DEFAULT_FALLBACK_RISK_BAND, alias="fallbackRiskBand"
    )
    defaults: Defaults = Defaults()

    @field_validator("confidence_by_unknowns")
    @classmethod
    def _sort_confidence(cls, bands: Tuple[ConfidenceBand, ...]) -> Tuple[ConfidenceBand, ...]:
        return tuple(sorted(bands, key=lambda b: b.max_unknowns))

    @field_validator("risk_bands")
    @classmethod
    def _sort_risk(cls, bands: Tuple[RiskBand, ...]) -> Tuple[RiskBand, ...]:
        return tuple(sorted(bands, key=lambda b: b.min_score, reverse=True))


# ---------------------------------------------------------------------------
# rulesInOrder
# ---------------------------------------------------------------------------

class EarlyExitRule(_RulesetModel):
    """If every condition in ``when_all`` holds, return ``outcome`` immediately."""

    id: Optional[str] = None
    when_all: Tuple[Condition, ...] = Field(default=(), alias="whenAll")
    outcome: Outcome


# ---------------------------------------------------------------------------
# scoring
# ---------------------------------------------------------------------------

_PENALTY_KEYS = {"label", "points", "detail", "when"}


class UnknownPenalty(_RulesetModel):
    """Adds ``points`` and one unknown when ``when`` matches.

    The compact document shape ``{field, equals, label, points}`` is also
    accepted; the condition keys are folded into ``when``.
    """

    label: str
    points: int
    detail: Optional[str] = None
    when: Condition

    @model_validator(mode="before")
    @classmethod
    def _fold_inline_condition(cls, data: Any) -> Any:
        if isinstance(data, dict) and "when" not in data:
            condition = {k: v for k, v in data.items() if k not in _PENALTY_KEYS}
            data = {k: v for k, v in data.items() if k in _PENALTY_KEYS}
            data["when"] = condition
        return data


class HighRiskTrigger(_RulesetModel):
    """Terminates evaluation when any condition in ``when_any`` holds.

    ``when_any`` must list at least one condition.
    """

    label: str
    add_points: int = Field(alias="addPoints")
    detail: str = ""
    when_any: Tuple[Condition, ...] = Field(alias="whenAny", min_length=1)
    outcome: Outcome


class ConditionalTrigger(_RulesetModel):
    """Terminates evaluation when all three guards pass.

    ``when_all`` and ``when_any`` are each vacuously satisfied when empty;
    ``numeric`` is satisfied when absent.
    """

    label: str
    add_points: int = Field(alias="addPoints")
    detail: str = ""
    when_all: Tuple[Condition, ...] = Field(default=(), alias="whenAll")
    when_any: Tuple[Condition, ...] = Field(default=(), alias="whenAny")
    numeric: Optional[NumericCondition] = None
    outcome: Outcome


class LowerRiskAdd(_RulesetModel):
    """Adds ``add_points`` when its guards pass; never terminates evaluation."""

    label: str
    add_points: int = Field(alias="addPoints")
    detail: str = ""
    when_all: Tuple[Condition, ...] = Field(default=(), alias="whenAll")
    numeric: Optional[NumericCondition] = None


class Scoring(_RulesetModel):
    baseline_drivers: Tuple[Driver, ...] = Field(default=(), alias="baselineDrivers")
    unknown_penalties: Tuple[UnknownPenalty, ...] = Field(default=(), alias="unknownPenalties")
    high_risk_triggers: Tuple[HighRiskTrigger, ...] = Field(default=(), alias="highRiskTriggers")
    conditional_triggers: Tuple[ConditionalTrigger, ...] = Field(
        default=(), alias="conditionalTriggers"
    )
    lower_risk_adds: Tuple[LowerRiskAdd, ...] = Field(default=(), alias="lowerRiskAdds")
    default_outcome: Outcome = Field(alias="defaultOutcome")
    default_recommendations: Tuple[str, ...] = Field(
        default=(), alias="defaultRecommendations"
    )


# ---------------------------------------------------------------------------
# report (presentation only)
# ---------------------------------------------------------------------------

class DriverRecommendation(_RulesetModel):
    """Extra recommendations added when a driver label contains a substring."""

    driver_label_contains: str = Field(alias="driverLabelContains")
    add: Tuple[str, ...] = ()


class UncertaintyRecommendation(_RulesetModel):
    """Recommendation added whenever confidence is not ``unless_confidence``."""

    unless_confidence: str = Field(alias="unlessConfidence")
    recommendation: str


class ReportConfig(_RulesetModel):
    template: str = "generic.jinja2"
    max_drivers: int = Field(default=DEFAULT_MAX_DRIVERS, alias="maxDrivers", ge=1)
    max_recommendations: int = Field(
        default=DEFAULT_MAX_RECOMMENDATIONS, alias="maxRecommendations", ge=1
    )
    empty_driver: Driver = Field(
        default=Driver(
            label="No specific drivers identified",
            points=0,
            detail="No additional risk drivers beyond baseline screening.",
        ),
        alias="emptyDriver",
    )
    driver_recommendations: Tuple[DriverRecommendation, ...] = Field(
        default=(), alias="driverRecommendations"
    )
    uncertainty: Optional[UncertaintyRecommendation] = None


# ---------------------------------------------------------------------------
# Ruleset
# ---------------------------------------------------------------------------

class Ruleset(_RulesetModel):
    """A complete screening policy.  ``meta`` and ``scoring`` are required."""

    meta: RulesetMeta
    rules_in_order: Tuple[EarlyExitRule, ...] = Field(default=(), alias="rulesInOrder")
    scoring: Scoring
    report: ReportConfig = ReportConfig()

    @property
    def id(self) -> str | None:
        return self.meta.id
