"""FastAPI dependency injection — provides the store, engine and report builder.

All three are created once in the lifespan handler and stashed on
``app.state``; they hold no per-request state.
"""

from fastapi import Request

from species_screening.engine import DecisionEngine
from species_screening.report import ReportBuilder
from species_screening.ruleset import RulesetStore


def get_store(request: Request) -> RulesetStore:
    """Return the RulesetStore singleton from ``app.state``."""
    return request.app.state.store


def get_engine(request: Request) -> DecisionEngine:
    """Return the DecisionEngine singleton from ``app.state``."""
    return request.app.state.engine


def get_report_builder(request: Request) -> ReportBuilder:
    """Return the ReportBuilder singleton from ``app.state``."""
    return request.app.state.report_builder
