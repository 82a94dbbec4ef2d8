"""FastAPI application factory and setup."""

import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.responses import JSONResponse, Response

from bookshelf.api.http.app_data import ApplicationDependencies
from bookshelf.api.http.middleware.timeouts import ConnectionTimeoutMiddleware
from bookshelf.api.http.routers import books, categories
from bookshelf.core.errors import CatalogError, FatalStartupError, StorageError
from bookshelf.core.services import DbManageService, DbSessionService
from bookshelf.runtime.config.config_data import ConfigData
from bookshelf.runtime.context import get_config

__all__ = ["app", "create_app", "startup", "shutdown"]


def _error_response(request: Request, status_code: int, detail: object) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": jsonable_encoder(detail)},
        headers=headers,
    )


# --- Lifecycle hooks ---
def startup(deps: ApplicationDependencies) -> None:
    """Verify the database and bring the schema up to date before serving."""
    database_service = deps.database_service
    logger.info("Starting up; database dialect is {}", database_service.engine.dialect.name)

    if not database_service.health_check():
        raise FatalStartupError("Database is unreachable")
    DbManageService(database_service.engine).ensure_schema()


def shutdown(deps: ApplicationDependencies) -> None:
    logger.info("Shutting down application")
    deps.database_service.dispose()


def create_app(
    dependencies: ApplicationDependencies | None = None,
    config: ConfigData | None = None,
) -> FastAPI:
    """Build the application.

    ``dependencies`` lets tests supply their own engine and clock; when it
    is omitted the lifespan builds them from configuration.
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        deps = dependencies or ApplicationDependencies(
            database_service=DbSessionService(config.database)
        )
        startup(deps)
        app.state.app_dependencies = deps
        try:
            yield
        finally:
            shutdown(deps)

    app = FastAPI(
        title="Bookshelf",
        lifespan=lifespan,
        docs_url=None if config.app.environment == "production" else "/docs",
        redoc_url=None,
    )

    # --- Error mapping ---
    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
        if isinstance(exc, StorageError) and config.app.environment == "production":
            return _error_response(request, exc.status_code, "Internal Server Error")
        return _error_response(request, exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error_response(request, 400, exc.errors())

    # --- Request logging middleware ---
    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        base_ctx = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }

        start = time.perf_counter()

        with logger.contextualize(**base_ctx):
            try:
                logger.info("request.start {} {}", request.method, request.url.path)
                response = await call_next(request)
            except Exception as exc:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.bind(
                    status_code=500,
                    duration_ms=round(duration_ms, 1),
                    error_type=type(exc).__name__,
                ).exception("request.error")
                detail = (
                    "Internal Server Error"
                    if config.app.environment == "production"
                    else str(exc) or type(exc).__name__
                )
                return _error_response(request, 500, detail)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end {} in {:.1f}ms", response.status_code, duration_ms)

            response.headers.setdefault("X-Request-ID", request_id)
            return response

    # Outermost, so every receive/send the server sees is bounded
    app.add_middleware(
        ConnectionTimeoutMiddleware,
        read_timeout=config.app.read_timeout,
        write_timeout=config.app.write_timeout,
    )

    # --- Router registration ---
    app.include_router(categories.router)
    app.include_router(books.router)

    return app


app = create_app()
