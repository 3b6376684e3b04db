from __future__ import annotations

from fastapi import FastAPI

from ..settings import Settings, get_settings
from .errors import register_error_handlers
from .routes.blend import router as blend_router


def create_app(settings: Settings) -> FastAPI:
    app = FastAPI(title="FertiBlend Engine", version="0.1.0")
    app.dependency_overrides[get_settings] = lambda: settings

    app.include_router(blend_router, prefix="/v1", tags=["blend"])
    register_error_handlers(app)

    @app.get("/livez")
    def livez() -> dict:
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz() -> dict:
        return {"status": "ready"}

    return app
