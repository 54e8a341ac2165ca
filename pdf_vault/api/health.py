"""Health check and monitoring endpoints.

Provides endpoints for:
- Basic health checks (metadata database and blob store)
- Kubernetes readiness/liveness probes
"""

import time
from typing import Dict, Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from pdf_vault.core.config import settings
from pdf_vault.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


async def _component_status(request: Request) -> Dict[str, bool]:
    db = request.app.state.db
    document_service = request.app.state.document_service
    return {
        "database": await db.test_connection(timeout=5.0),
        "blob_store": await document_service.blob_store_healthy(),
    }


@router.get("/")
async def root() -> Dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "status": "running",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/health",
        "documents": f"{settings.API_PREFIX}/documents",
    }


@router.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """
    Health check endpoint with store connectivity verification.

    Returns 200 if both stores are usable, 503 otherwise.
    """
    try:
        components = await _component_status(request)

        if not all(components.values()):
            logger.warning("Health check failed", **components)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "status": "unhealthy",
                    "timestamp": time.time(),
                    "version": settings.VERSION,
                    "components": components,
                },
            )

        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "storage_backend": settings.STORAGE_BACKEND,
            "components": components,
        }

    except Exception as e:
        logger.error("Health check failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "timestamp": time.time(),
                "version": settings.VERSION,
                "error": str(e),
            },
        )


@router.get("/ready")
async def readiness_check(request: Request) -> Dict[str, Any]:
    """Readiness probe endpoint for Kubernetes."""
    try:
        db_available = await request.app.state.db.test_connection(timeout=5.0)

        if not db_available:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "ready": False,
                    "reason": "Database not ready",
                    "timestamp": time.time(),
                },
            )

        return {"ready": True, "timestamp": time.time()}

    except Exception as e:
        logger.error("Readiness check failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ready": False, "reason": str(e), "timestamp": time.time()},
        )


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """Liveness probe endpoint for Kubernetes."""
    return {"alive": True, "timestamp": time.time()}
