"""Result models — the contract between the engine and its callers.

``DecisionResult`` is the engine's only output.  ``ScreeningReport`` is the
presentation package assembled from it by :class:`ReportBuilder`.

Both serialise with camelCase keys (``model_dump(by_alias=True)``) because
rendering templates and HTTP clients depend on those names.
"""

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field

from .ruleset import Driver


class DecisionResult(BaseModel):
    """One fully-formed screening decision.

    ``drivers`` is sorted by descending points; ties keep accumulation order.
    ``unknowns`` is the count that produced ``confidence``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    determination: str
    risk_score: int = Field(alias="riskScore")
    risk_band: str = Field(alias="riskBand")
    confidence: str
    unknowns: int = 0
    why_text: str = Field(default="", alias="whyText")
    next_action: str = Field(default="", alias="nextAction")
    recommendations: Tuple[str, ...] = ()
    drivers: Tuple[Driver, ...] = ()


class ScreeningReport(BaseModel):
    """Caller-facing package: the decision plus documentation text."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ruleset_id: str | None = Field(default=None, alias="rulesetId")
    determination: str
    risk_score: int = Field(alias="riskScore")
    risk_score_max: int = Field(alias="riskScoreMax")
    risk_band: str = Field(alias="riskBand")
    confidence: str
    why_text: str = Field(default="", alias="whyText")
    next_action: str = Field(default="", alias="nextAction")
    top_drivers: Tuple[Driver, ...] = Field(default=(), alias="topDrivers")
    recommendations: Tuple[str, ...] = ()
    documentation_text: str = Field(default="", alias="documentationText")
