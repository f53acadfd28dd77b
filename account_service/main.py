"""FastAPI application wiring for the account service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import AsyncConnectionPool

from .api.routes import router as v1_router
from .config import Settings, get_settings
from .domain.service import AccountService
from .logging_setup import configure_logging
from .memory_repository import InMemoryAccountRepository
from .repository import PostgresAccountRepository

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def open_repository(settings: Settings):
    """Yield the repository selected by ``ACCOUNT_STORE``, closing its pool on exit."""
    if settings.account_store == "postgres":
        pool = AsyncConnectionPool(settings.database_url, open=False)
        await pool.open()
        try:
            repository = PostgresAccountRepository(pool)
            await repository.ensure_schema()
            logger.info("account store configured for postgres")
            yield repository
        finally:
            await pool.close()
    else:
        logger.info("account store using in-memory backend")
        yield InMemoryAccountRepository()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (repository, service) for the app lifecycle."""
    configure_logging(settings.log_level)
    async with open_repository(settings) as repository:
        app.state.account_service = AccountService(repository)
        yield


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(v1_router)
