"""FastAPI application entry point.

Main application setup with middleware, routing, error envelopes and
lifecycle management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from draftgen.api import drafts_router, files_router, users_router
from draftgen.api.schemas import ErrorBody, ErrorResponse
from draftgen.core.config import Settings, get_settings
from draftgen.core.exceptions import DraftServiceError
from draftgen.core.factory import ComponentFactory
from draftgen.core.logging_config import setup_logging
from draftgen.db.session import close_db, create_all_tables

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again."

HTTP_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: "AUTH_REQUIRED",
    status.HTTP_403_FORBIDDEN: "FORBIDDEN",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
}


def error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    """Build the ``{error: {code, message, details}}`` envelope."""
    body = ErrorResponse(error=ErrorBody(code=code, message=message, details=details))
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager.

    Handles startup and shutdown events for proper resource management.
    """
    settings: Settings = app.state.settings

    # Startup
    logger.info("Starting Draft Generation API...")

    try:
        await create_all_tables(settings)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise

    yield

    # Shutdown
    logger.info("Shutting down Draft Generation API...")

    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {e}", exc_info=True)


def register_exception_handlers(app: FastAPI) -> None:
    """Map every error to the JSON error envelope."""

    @app.exception_handler(DraftServiceError)
    async def draft_service_exception_handler(request: Request, exc: DraftServiceError):
        """Handle pipeline errors using their own code and status."""
        if exc.public:
            logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
            return error_response(exc.status_code, exc.code, exc.message, exc.details)

        logger.error(
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            exc_info=exc,
        )
        return error_response(exc.status_code, exc.code, GENERIC_FAILURE_MESSAGE)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle malformed request bodies and query parameters."""
        logger.warning(f"Request validation error: {exc.errors()}")
        details = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
                "code": "INVALID_TYPE",
                "message": error.get("msg", "Invalid value"),
            }
            for error in exc.errors()
        ]
        return error_response(
            status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", "Invalid request", details
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle routing and framework HTTP errors."""
        code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
        return error_response(exc.status_code, code, str(exc.detail))

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(f"Unhandled exception: {exc}", exc_info=exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", GENERIC_FAILURE_MESSAGE
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings. If None, loads from environment.

    Returns:
        Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Draft Generation API",
        description="Fill legal document templates and manage generated drafts",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Store settings and wiring in app state
    app.state.settings = settings
    app.state.factory = ComponentFactory(settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(drafts_router)
    app.include_router(users_router)
    if settings.blob_store_type == "local":
        app.include_router(files_router)
    logger.info("Registered API routers")

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        return {
            "status": "healthy",
            "service": "draftgen-api",
            "version": "0.1.0",
        }

    register_exception_handlers(app)

    logger.info("FastAPI application created successfully")
    return app


def get_app() -> FastAPI:
    """Build the application from environment settings with logging set up.

    Used as the uvicorn factory: ``uvicorn draftgen.main:get_app --factory``.
    """
    settings = get_settings()
    setup_logging(settings)
    return create_app(settings)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Starting uvicorn server on port 8000...")
    uvicorn.run(
        "draftgen.main:get_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
