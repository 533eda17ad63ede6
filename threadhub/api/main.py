"""
threadhub.api.main - FastAPI Application Factory

Creates and configures the FastAPI application for the threadhub API.

Usage:
    # Development
    uvicorn threadhub.api.main:app --reload

    # Production
    uvicorn threadhub.api.main:app --host 0.0.0.0 --port 8000
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from threadhub.api.v1.router import api_router
from threadhub.exceptions import ThreadhubError
from threadhub.models.database import get_engine, get_sessionmaker
from threadhub.settings import ThreadhubSettings, get_settings

logger = logging.getLogger(__name__)


def configure_logging(settings: ThreadhubSettings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Sets up database connection pool on startup,
    cleans up on shutdown.
    """
    logger.info("Starting threadhub API server...")

    engine = get_engine()
    app.state.engine = engine
    app.state.sessionmaker = get_sessionmaker(engine)

    logger.info("Database connection pool initialized")

    yield

    logger.info("Shutting down threadhub API server...")
    await engine.dispose()
    logger.info("Database connections closed")


async def threadhub_error_handler(request: Request, exc: ThreadhubError) -> JSONResponse:
    """Render pipeline errors as ``{"error": ...}`` with their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.url.path} rejected: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render dependency and routing errors in the same ``{"error": ...}`` shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Reject malformed query parameters with 400 instead of FastAPI's 422."""
    logger.info(f"{request.url.path} rejected invalid parameters: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid query parameters"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so failures are never returned as partial success."""
    logger.exception(f"Unhandled error on {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def create_app(settings: ThreadhubSettings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="threadhub API",
        description="Unified thread listing for Gmail and Microsoft 365 mailboxes",
        version="0.1.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    logger.info(f"Configuring CORS for origins: {settings.cors_origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ThreadhubError, threadhub_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


# Create the application instance
app = create_app()
