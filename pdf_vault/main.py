"""FastAPI Application Entry Point.

PDF document store built with FastAPI, featuring:
- PDF upload, listing, download and deletion
- File bytes in a blob store (local filesystem or Google Cloud Storage)
- Document metadata in SQLite or PostgreSQL
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from pdf_vault.core.config import settings
from pdf_vault.core.logging import configure_logging, setup_request_logging, get_logger
from pdf_vault.core.exceptions import setup_exception_handlers
from pdf_vault.core.db_client import DatabaseManager
from pdf_vault.core.blob_store import get_blob_store
from pdf_vault.core.middleware import setup_all_middleware
from pdf_vault.services.document import DocumentCrudService, DocumentService

# Configure logging first
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    logger.info(
        "Starting application",
        project_name=settings.PROJECT_NAME,
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        storage_backend=settings.STORAGE_BACKEND,
        debug=settings.DEBUG,
    )

    startup_tasks = []

    db = DatabaseManager(settings.DATABASE_URL)
    try:
        if settings.CREATE_TABLES_ON_STARTUP:
            await db.create_tables()
            startup_tasks.append("Database tables created/verified")

        if await db.test_connection():
            startup_tasks.append("Database connected")
        else:
            logger.warning("Database connection test failed")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        if settings.is_production:
            raise

    blob_store = get_blob_store(settings)
    startup_tasks.append(f"Blob store initialized ({settings.STORAGE_BACKEND})")

    app.state.db = db
    app.state.document_service = DocumentService(
        blob_store=blob_store,
        metadata_store=DocumentCrudService(db),
    )

    logger.info("Application startup completed", tasks=startup_tasks)

    yield

    # Shutdown
    logger.info("Shutting down application")

    try:
        await db.close()
    except Exception as e:
        logger.error("Error closing database", error=str(e))

    logger.info("Application shutdown completed")


# API Description
API_DESCRIPTION = """# PDF Vault

## Overview
Upload, list, download and delete PDF documents.

## Documents
- `POST /documents/upload` - Upload a PDF (multipart field `file`)
- `GET /documents` - List documents, oldest first
- `GET /documents/{id}` - Download a PDF
- `DELETE /documents/{id}` - Delete a PDF

## Errors
Every error uses the same envelope:
`{"error": {"code", "message", "error_id", "details", "path"}}`
"""

# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=API_DESCRIPTION,
    openapi_url="/openapi.json" if settings.DEBUG else None,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Setup middleware (timing, then CORS as the outermost layer)
setup_all_middleware(app)

setup_exception_handlers(app)

# Setup request logging
setup_request_logging(app)


# Include health router (root level endpoints)
from pdf_vault.api.health import router as health_router  # noqa: E402
from pdf_vault.api.documents_main import router as documents_router  # noqa: E402

app.include_router(health_router)

app.include_router(documents_router, prefix=settings.API_PREFIX, tags=["Documents"])


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(
        "pdf_vault.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run()
