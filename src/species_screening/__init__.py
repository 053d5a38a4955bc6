"""species_screening — data-driven protected-species screening engine.

Public API:
    DecisionEngine    — evaluates an answer map against a ruleset
    ConditionMatcher  — evaluates single conditions (stateless)
    RulesetStore      — loads YAML rulesets into typed models, supports reload
    parse_ruleset     — validates a raw ruleset document
    ReportBuilder     — renders a DecisionResult into a ScreeningReport
    RulesetError      — configuration defect raised at load time

Result models:
    DecisionResult    — the engine's only output
    ScreeningReport   — presentation package with documentation text
    Driver            — one scored reason in a result
"""

from species_screening.engine import DecisionEngine
from species_screening.errors import RulesetError
from species_screening.evaluator import ConditionMatcher, to_number
from species_screening.models.result import DecisionResult, ScreeningReport
from species_screening.models.ruleset import Driver, Ruleset
from species_screening.report import ReportBuilder
from species_screening.ruleset import RulesetStore, load_ruleset_file, parse_ruleset

__all__ = [
    # Engine & store
    "ConditionMatcher",
    "DecisionEngine",
    "RulesetStore",
    "load_ruleset_file",
    "parse_ruleset",
    "to_number",
    # Errors
    "RulesetError",
    # Models
    "DecisionResult",
    "Driver",
    "Ruleset",
    "ScreeningReport",
    # Presentation
    "ReportBuilder",
]
