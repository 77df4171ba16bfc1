from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from chat_relay.api.middleware.request_context import RequestContextMiddleware
from chat_relay.api.v1.routers import health, history, ws
from chat_relay.application.exceptions import StoreError
from chat_relay.config import Settings, settings
from chat_relay.infrastructure.db.session import build_engine, ensure_sqlite_directory
from chat_relay.infrastructure.db.store import SqlAlchemyChatStore
from chat_relay.infrastructure.ws.registry import ConnectionRegistry
from chat_relay.services.event_router import EventRouter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""
    cfg: Settings = app.state.settings
    ensure_sqlite_directory(cfg.DATABASE_URL)
    store = SqlAlchemyChatStore(build_engine(cfg))
    try:
        await store.init_schema()
    except StoreError:
        await store.close()
        raise
    registry = ConnectionRegistry()

    app.state.store = store
    app.state.registry = registry
    app.state.event_router = EventRouter(store, registry)
    logger.info("Chat relay ready")

    yield

    await registry.close_all(status.WS_1001_GOING_AWAY)
    await store.close()
    logger.info("Chat relay stopped")


def create_app(app_settings: Settings | None = None) -> FastAPI:
    cfg = app_settings or settings
    app = FastAPI(
        title="Chat Relay",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = cfg

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(history.router)
    app.include_router(ws.router)

    # Mounted last: "/" would otherwise shadow every route above.
    static_dir = Path(cfg.STATIC_DIR)
    if static_dir.is_dir():
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.info("Static directory %s not found, browser client not served", static_dir)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StoreError)
    async def _store_unavailable(_req: Request, exc: StoreError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": exc.detail})
