"""Screening endpoints — evaluate an answer map and render reports.

Both endpoints are stateless: the answers are read, evaluated against the
currently loaded ruleset, and the result is returned.  Nothing is stored.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from species_screening.engine import DecisionEngine
from species_screening.models.result import DecisionResult, ScreeningReport
from species_screening.report import ReportBuilder
from species_screening.ruleset import RulesetStore

from screening_server.dependencies import get_engine, get_report_builder, get_store

router = APIRouter(prefix="/rulesets", tags=["screenings"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class ScreeningRequest(BaseModel):
    """Body for evaluate/report: the flat questionnaire answer map."""

    answers: dict[str, Any] = {}


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/{ruleset_id}/evaluate", response_model=DecisionResult)
def evaluate(
    ruleset_id: str,
    body: ScreeningRequest,
    store: RulesetStore = Depends(get_store),
    engine: DecisionEngine = Depends(get_engine),
) -> DecisionResult:
    """Evaluate the answers and return the bare decision."""
    ruleset = store.get(ruleset_id)
    return engine.evaluate(body.answers, ruleset)


@router.post("/{ruleset_id}/report", response_model=ScreeningReport)
def report(
    ruleset_id: str,
    body: ScreeningRequest,
    store: RulesetStore = Depends(get_store),
    engine: DecisionEngine = Depends(get_engine),
    builder: ReportBuilder = Depends(get_report_builder),
) -> ScreeningReport:
    """Evaluate the answers and return the full screening report."""
    ruleset = store.get(ruleset_id)
    result = engine.evaluate(body.answers, ruleset)
    return builder.build(body.answers, result, ruleset)
