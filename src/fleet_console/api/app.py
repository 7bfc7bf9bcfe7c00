"""
fleet_console.api.app

FastAPI app factory for the record-store service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine/session factory).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from fleet_console import __version__
from fleet_console.api.routers.auth import router as auth_router
from fleet_console.api.routers.dev import router as dev_router
from fleet_console.api.routers.health import router as health_router
from fleet_console.api.routers.records import router as records_router
from fleet_console.db.init_db import init_db
from fleet_console.db.session import create_engine, create_sessionmaker
from fleet_console.observability.logging import configure_logging, get_logger
from fleet_console.observability.middleware import RequestContextMiddleware
from fleet_console.settings import Settings

log = get_logger(__name__)


async def startup(app: FastAPI) -> None:
    settings: Settings = app.state.settings
    log.info("startup", env=settings.env)
    engine = create_engine(settings)
    app.state.engine = engine
    app.state.sessionmaker = create_sessionmaker(engine)
    if settings.env in ("dev", "test"):
        # Prod runs Alembic migrations instead.
        await init_db(engine)


async def shutdown(app: FastAPI) -> None:
    engine = getattr(app.state, "engine", None)
    if engine is not None:
        await engine.dispose()
    log.info("shutdown")


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json=settings.env != "dev",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await startup(app)
        try:
            yield
        finally:
            await shutdown(app)

    app = FastAPI(
        title="Fleet Records",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(records_router)
    if settings.env != "prod":
        app.include_router(dev_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Tests drive `startup`/`shutdown` directly because httpx.ASGITransport does not
# run the lifespan protocol.
