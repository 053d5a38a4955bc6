"""Public model re-exports for species_screening.

Consumers should import from ``species_screening.models`` rather than
reaching into sub-modules directly.
"""

# --- Conditions ---
from species_screening.models.condition import (
    AllCondition,
    AnyCondition,
    Condition,
    EqualsCondition,
    IncludesCondition,
    NotEqualsCondition,
    NotNumberCondition,
    NumericCondition,
    condition_kind,
    parse_condition,
)

# --- Ruleset document ---
from species_screening.models.ruleset import (
    ConditionalTrigger,
    ConfidenceBand,
    Defaults,
    Driver,
    DriverRecommendation,
    EarlyExitRule,
    HighRiskTrigger,
    LowerRiskAdd,
    Outcome,
    ReportConfig,
    RiskBand,
    Ruleset,
    RulesetMeta,
    Scoring,
    UncertaintyRecommendation,
    UnknownPenalty,
)

# --- Results ---
from species_screening.models.result import DecisionResult, ScreeningReport

__all__ = [
    # Conditions
    "AllCondition",
    "AnyCondition",
    "Condition",
    "EqualsCondition",
    "IncludesCondition",
    "NotEqualsCondition",
    "NotNumberCondition",
    "NumericCondition",
    "condition_kind",
    "parse_condition",
    # Ruleset
    "ConditionalTrigger",
    "ConfidenceBand",
    "Defaults",
    "Driver",
    "DriverRecommendation",
    "EarlyExitRule",
    "HighRiskTrigger",
    "LowerRiskAdd",
    "Outcome",
    "ReportConfig",
    "RiskBand",
    "Ruleset",
    "RulesetMeta",
    "Scoring",
    "UncertaintyRecommendation",
    "UnknownPenalty",
    # Results
    "DecisionResult",
    "ScreeningReport",
]
