"""HTTP mapping for marketplace errors.

Protean's own handlers cover ``ValidationError`` (and with it the business
rule rejections that subclass it) and ``ObjectNotFoundError``. Everything
else that escapes a route is logged and answered with a bare 500.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from marketplace.errors import Forbidden, StorageConflict

logger = structlog.get_logger(__name__)


async def forbidden_handler(request: Request, exc: Forbidden) -> JSONResponse:
    return JSONResponse(status_code=403, content={"error": exc.message})


async def conflict_handler(request: Request, exc: StorageConflict) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={"error": "The resource is busy, please retry", "retryable": True},
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, method=request.method)
    return JSONResponse(status_code=500, content={"error": "Something went wrong"})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(Forbidden, forbidden_handler)
    app.add_exception_handler(StorageConflict, conflict_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
