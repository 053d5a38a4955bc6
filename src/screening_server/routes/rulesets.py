"""Ruleset reference endpoints — list loaded policies and inspect one.

Read-only views of what the ``RulesetStore`` currently holds.
"""

from typing import Any

from fastapi import APIRouter, Depends

from species_screening.ruleset import RulesetStore

from screening_server.dependencies import get_store

router = APIRouter(prefix="/rulesets", tags=["rulesets"])


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("")
def list_rulesets(
    store: RulesetStore = Depends(get_store),
) -> list[dict]:
    """Return a summary of every loaded ruleset."""
    return [
        {
            "id": ruleset.id,
            "title": ruleset.meta.title,
            "species": ruleset.meta.species,
            "version": ruleset.meta.version,
            "riskScoreMax": ruleset.meta.risk_score_max,
        }
        for ruleset in store.all()
    ]


@router.get("/{ruleset_id}")
def get_ruleset(
    ruleset_id: str,
    store: RulesetStore = Depends(get_store),
) -> dict[str, Any]:
    """Return the full ruleset document (camelCase keys).

    Unknown ids raise ``KeyError`` → 404 via the global handler.
    """
    return store.get(ruleset_id).model_dump(by_alias=True, mode="json")
