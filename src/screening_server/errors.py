"""Global exception handlers — map SDK exceptions to HTTP status codes.

Rather than catching SDK errors in every route, we install global
handlers.  The raw exception message is logged server-side; clients get
a generic description, except for ruleset defects reported to admins.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from species_screening.errors import RulesetError

logger = logging.getLogger(__name__)


async def ruleset_error_handler(request: Request, exc: RulesetError) -> JSONResponse:
    """Map a configuration defect to 422.

    Only reachable from admin endpoints (reload), so the defect detail is
    returned to help the policy author fix the file.
    """
    logger.error("RulesetError at %s: %s", request.url, exc)
    return JSONResponse(
        status_code=422,
        content={"detail": "Ruleset configuration defect", "error": str(exc)},
    )


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map any other ``ValueError`` to 400 with a safe message."""
    logger.warning("ValueError at %s: %s", request.url, exc)
    return JSONResponse(status_code=400, content={"detail": "Invalid request"})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (e.g. unknown ruleset id) to 404."""
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
