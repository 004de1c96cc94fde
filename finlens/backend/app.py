from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .routers import analytics

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("finlens.backend")


def create_app() -> FastAPI:
    app = FastAPI(title=settings.title, version=settings.version)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(analytics.router)

    @app.get("/healthz")
    def _healthz() -> dict:
        return {"status": "ok", "version": settings.version}

    logger.info("FinLens backend configured (cache ttl=%ss)", settings.analytics_cache_ttl)
    return app


app = create_app()
