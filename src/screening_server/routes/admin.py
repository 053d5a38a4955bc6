"""Admin endpoints — ruleset hot reload.

Protected by the ``ADMIN_API_KEY`` setting.  Every request must include an
``X-Admin-Key`` header whose value matches the configured key.  Returns
401 if missing, 403 if wrong or if admin access is not configured.
"""

import hmac

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import BaseModel

from species_screening.ruleset import RulesetStore

from screening_server.dependencies import get_store

router = APIRouter(prefix="/admin", tags=["admin"])


# ------------------------------------------------------------------
# Auth dependency
# ------------------------------------------------------------------

async def require_admin_key(
    request: Request,
    x_admin_key: str | None = Header(None, alias="X-Admin-Key"),
) -> str:
    """Validate the ``X-Admin-Key`` header against the configured admin key."""
    expected: str | None = request.app.state.settings.admin_api_key
    if not expected:
        raise HTTPException(
            status_code=403,
            detail="Admin endpoints are disabled (ADMIN_API_KEY not configured)",
        )
    if not x_admin_key:
        raise HTTPException(status_code=401, detail="X-Admin-Key header is required")
    if not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=403, detail="Invalid admin key")
    return x_admin_key


# ------------------------------------------------------------------
# Response models
# ------------------------------------------------------------------

class ReloadResult(BaseModel):
    """Response body for a ruleset reload."""
    rulesets: int
    ids: list[str]


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/rulesets/reload")
def reload_rulesets(
    store: RulesetStore = Depends(get_store),
    _admin: str = Depends(require_admin_key),
) -> ReloadResult:
    """Re-read the ruleset directory and swap in the new policies.

    A defective file raises ``RulesetError`` (→ 422) and leaves the
    previously loaded rulesets serving requests.
    """
    count = store.reload()
    return ReloadResult(rulesets=count, ids=store.ids())
