"""FastAPI application factory for the store inventory service."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from inventory_service import __version__
from inventory_service.config import Settings, get_settings
from inventory_service.db import Database
from inventory_service.exceptions import (
    ConcurrentModification,
    DuplicateKey,
    EmptyDocument,
    HistoryImmutable,
    InsufficientStock,
    InvalidDocumentState,
    InvalidDocumentType,
    InvalidLineData,
    InventoryError,
    ItemAlreadyDisposed,
    ItemUnavailable,
    NoCurrentLocation,
    NotFound,
    ReferentialConstraint,
    SameLocation,
)
from inventory_service.logging import configure_logging, logger
from inventory_service.routes import api_router
from inventory_service.seed import seed_demo_data

ERROR_STATUS = {
    NotFound: status.HTTP_404_NOT_FOUND,
    DuplicateKey: status.HTTP_409_CONFLICT,
    InvalidDocumentState: status.HTTP_409_CONFLICT,
    ItemAlreadyDisposed: status.HTTP_409_CONFLICT,
    ItemUnavailable: status.HTTP_409_CONFLICT,
    InsufficientStock: status.HTTP_409_CONFLICT,
    SameLocation: status.HTTP_409_CONFLICT,
    NoCurrentLocation: status.HTTP_409_CONFLICT,
    ReferentialConstraint: status.HTTP_409_CONFLICT,
    HistoryImmutable: status.HTTP_409_CONFLICT,
    ConcurrentModification: status.HTTP_409_CONFLICT,
    InvalidDocumentType: status.HTTP_422_UNPROCESSABLE_ENTITY,
    EmptyDocument: status.HTTP_422_UNPROCESSABLE_ENTITY,
    InvalidLineData: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def status_for(exc: InventoryError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in ERROR_STATUS:
            return ERROR_STATUS[error_type]
    return status.HTTP_400_BAD_REQUEST


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    database = database or Database(settings.database)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.init_schema()
        if settings.seed_demo_data:
            with database.session_scope() as session:
                seed_demo_data(session, settings.default_operator)
        logger.info("Application started", app=settings.app_name, environment=settings.environment)
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    @app.exception_handler(InventoryError)
    async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
        return JSONResponse(
            status_code=status_for(exc),
            content={
                "error": type(exc).__name__,
                "detail": exc.message,
                "context": {key: str(value) for key, value in exc.context.items()},
            },
        )

    app.include_router(api_router)

    @app.get("/health", tags=["monitoring"], summary="Return service health status")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app
