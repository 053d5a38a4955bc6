"""screening_server — FastAPI REST API for the species screening SDK.

Exposes the DecisionEngine as a stateless HTTP API: list rulesets,
evaluate answer maps, render screening reports, and hot-reload policy.
"""
