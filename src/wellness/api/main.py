"""FastAPI application factory."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlmodel import SQLModel

from wellness.api.routes import advice, circadian, dashboard, emotional, records
from wellness.db.engine import get_engine
from wellness.errors import DataUnavailable, PersistenceFailure, ValidationFailure

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build and return the FastAPI app."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Create tables on startup (idempotent); honours a test engine override
        engine = app.dependency_overrides.get(get_engine, get_engine)()
        SQLModel.metadata.create_all(engine)
        yield

    app = FastAPI(
        title="Wellness Signals API",
        description="Wellness signal analytics backend",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(request: Request, exc: ValidationFailure):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(DataUnavailable)
    @app.exception_handler(PersistenceFailure)
    async def store_failure_handler(request: Request, exc: Exception):
        logger.warning("Store failure on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": "Wellness store unavailable"})

    app.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
    app.include_router(circadian.router, prefix="/circadian-profile", tags=["circadian"])
    app.include_router(emotional.router, prefix="/emotional-state", tags=["emotional"])
    app.include_router(advice.router, prefix="/advice", tags=["advice"])
    app.include_router(records.router, tags=["records"])

    return app


# Module-level app instance for uvicorn
app = create_app()
