"""Screening constants shared across the SDK.

These are fallbacks for values a ruleset may leave out.  Several can be
overridden via environment variables so that deployments can adjust
policy defaults without code changes.
"""

import os

# Upper bound of the risk score when ``meta.riskScoreMax`` is not set.
DEFAULT_RISK_SCORE_MAX = int(os.getenv("DEFAULT_RISK_SCORE_MAX", "100"))

# Labels used when no configured band matches.
DEFAULT_FALLBACK_CONFIDENCE = os.getenv("DEFAULT_FALLBACK_CONFIDENCE", "Low")
DEFAULT_FALLBACK_RISK_BAND = os.getenv("DEFAULT_FALLBACK_RISK_BAND", "Low")

# Driver detail recorded for an unknown penalty that has no detail of its own.
DEFAULT_UNKNOWN_DETAIL = os.getenv(
    "DEFAULT_UNKNOWN_DETAIL",
    "Critical uncertainty increases screening risk and reduces confidence.",
)

# Report shaping limits.
DEFAULT_MAX_DRIVERS = int(os.getenv("DEFAULT_MAX_DRIVERS", "6"))
DEFAULT_MAX_RECOMMENDATIONS = int(os.getenv("DEFAULT_MAX_RECOMMENDATIONS", "10"))

# The questionnaire's "uncertain" choice.
UNKNOWN_ANSWER = "Not sure"

# Shown in documentation text for questions the caller did not answer.
NOT_PROVIDED = "Not provided"

# Ruleset file suffixes picked up by the store.
RULESET_SUFFIXES: set[str] = {".yaml", ".yml"}
