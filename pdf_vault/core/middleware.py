"""Middleware configuration for FastAPI application.

Provides:
- CORS middleware setup
- Request timing middleware
"""

import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from pdf_vault.core.config import settings
from pdf_vault.core.logging import get_logger

logger = get_logger(__name__)


def setup_cors_middleware(app: FastAPI) -> None:
    """Configure CORS middleware with settings from config.

    Args:
        app: FastAPI application instance
    """
    logger.info(
        "CORS configuration",
        environment=settings.ENVIRONMENT,
        origins=settings.CORS_ORIGINS,
        methods=settings.CORS_METHODS,
    )

    # Browsers reject credentials with a wildcard origin
    allow_credentials = "*" not in settings.CORS_ORIGINS

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=allow_credentials,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
        expose_headers=["Content-Disposition", "X-Process-Time"],
    )


def setup_timing_middleware(app: FastAPI) -> None:
    """Add request timing middleware.

    Args:
        app: FastAPI application instance
    """

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(round(process_time, 4))
        return response


def setup_all_middleware(app: FastAPI) -> None:
    """Setup all middleware in correct order.

    Args:
        app: FastAPI application instance
    """
    setup_timing_middleware(app)

    # Added last so it wraps everything and answers preflight requests
    setup_cors_middleware(app)
