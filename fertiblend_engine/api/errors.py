from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.blend.errors import BlendError

log = structlog.get_logger(__name__)


def blend_error_response(exc: BlendError) -> JSONResponse:
    return JSONResponse({"code": exc.code, "message": exc.message}, status_code=422)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):  # noqa: ANN001
        log.error("unhandled_error", path=request.url.path, error=str(exc))
        return JSONResponse({"code": "INTERNAL_ERROR", "message": str(exc)}, status_code=500)
