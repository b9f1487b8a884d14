"""
FastAPI application entry point.
"""

from typing import Optional

from fastapi import FastAPI

from api.connection import StateUserModule
from api.middleware import TrackingMiddleware
from api.session_store import build_store
from api.routers import tracking
from config.logging import configure_logging
from config.settings import Config
from core.module import TrackingModule
from core.store import Store
from core.tracking import Tracker


def create_app(
    config: Optional[Config] = None,
    store: Optional[Store] = None,
    module: Optional[TrackingModule] = None,
) -> FastAPI:
    """Build the app. Fails immediately if no usable store is configured."""
    config = config or Config.load()
    configure_logging(config.app.log_level, config.app.log_json)

    tracker = Tracker(
        store if store is not None else build_store(config.tracking),
        module=module or StateUserModule(),
        config=config.tracking,
    )

    app = FastAPI(title=config.app.title, version="0.1.0")
    app.state.tracker = tracker

    # Session cookie + request tracking
    app.add_middleware(TrackingMiddleware, tracker=tracker)

    app.include_router(tracking.router)

    @app.get("/health")
    def health():
        return {"status": "healthy"}

    return app


app = create_app()
