"""Route registration — mounts all routers under ``/api/v1``."""

from fastapi import FastAPI

from screening_server.routes.admin import router as admin_router
from screening_server.routes.rulesets import router as rulesets_router
from screening_server.routes.screenings import router as screenings_router

API_PREFIX = "/api/v1"


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers under the versioned API prefix."""
    app.include_router(rulesets_router, prefix=API_PREFIX)
    app.include_router(screenings_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)
