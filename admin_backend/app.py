"""
FastAPI application entry point for the admin backend.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from admin_backend.collection_routes import build_collection_routers
from admin_backend.config import get_settings
from admin_backend.routes import router


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title="Fitness Admin Backend (FastAPI)", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    for collection_router in build_collection_routers():
        app.include_router(collection_router, prefix=settings.api_prefix)
    return app


app = create_app()
