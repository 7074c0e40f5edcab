"""FastAPI application entry point.

Creates the FastAPI application instance with exception handlers
and middleware configuration.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from banqa.api.v1.router import api_router
from banqa.core.config import get_settings
from banqa.core.exceptions import AppException, ValidationError
from banqa.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="Banqa Wallet",
        description="Multi-currency wallet: top-ups, transfers, bills and withdrawals",
        version="1.0.0",
        debug=settings.DEBUG,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    register_exception_handlers(app)

    # Register API routers
    app.include_router(api_router, prefix="/api/v1")

    return app


def error_body(exc: AppException) -> dict:
    """Failure envelope shared by every endpoint."""
    body = {
        "success": False,
        "error": exc.message,
        "error_type": exc.__class__.__name__,
    }
    if isinstance(exc, ValidationError) and exc.missing_fields:
        body["missing_fields"] = exc.missing_fields
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers for the application."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request,
        exc: AppException,
    ) -> JSONResponse:
        """Handle all custom application exceptions.

        Returns a consistent JSON error response format.
        """
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        fields = sorted({
            str(err["loc"][-1]) for err in exc.errors()
            if err.get("type") == "missing" and err.get("loc")
        })
        error = ValidationError("Invalid request", missing_fields=fields)
        return JSONResponse(status_code=error.status_code, content=error_body(error))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "error_type": "InternalError"},
        )


# Create the application instance
app = create_app()
