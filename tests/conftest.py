"""
Pytest configuration and fixtures for the test suite.

This module provides shared fixtures for unit and integration tests.
Every fixture that touches storage uses a fresh SQLite file and upload
directory under ``tmp_path``.
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncGenerator
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio
from faker import Faker
from httpx import AsyncClient, ASGITransport

# Set test environment before importing app modules
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

fake = Faker()


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (API)")
    config.addinivalue_line("markers", "db: Database tests")
    config.addinivalue_line("markers", "api: API endpoint tests")


# =============================================================================
# Test Data Generators
# =============================================================================

def make_pdf_bytes(size: int = 1024) -> bytes:
    """Build PDF-looking content of exactly ``size`` bytes."""
    header = b"%PDF-1.4\n"
    trailer = b"\n%%EOF\n"
    body_len = max(size - len(header) - len(trailer), 0)
    body = (fake.text().encode("ascii", "ignore") * (body_len // 50 + 1))[:body_len]
    return (header + body + trailer)[:size]


@pytest.fixture
def sample_pdf_content() -> bytes:
    """1 KiB of PDF content."""
    return make_pdf_bytes(1024)


@pytest.fixture
def pdf_factory():
    """Builder for PDF content of a given size."""
    return make_pdf_bytes


@pytest.fixture
def pdf_filename() -> str:
    """Random PDF filename."""
    return fake.file_name(extension="pdf")


@pytest.fixture
def faker_document() -> dict:
    """Column values for one documents row."""
    original_name = fake.file_name(extension="pdf")
    return {
        "original_name": original_name,
        "stored_name": f"{fake.unix_time() * 1000:.0f}-{fake.hexify('^^^^^^^^')}-{original_name}",
        "size": fake.random_int(min=1, max=10_000_000),
        "created_at": datetime.now(timezone.utc),
    }


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def blob_store(upload_dir: Path):
    """Local filesystem blob store in a temporary directory."""
    from pdf_vault.core.local_blob_store import LocalBlobStore

    return LocalBlobStore(upload_dir)


@pytest_asyncio.fixture
async def db_manager(tmp_path: Path):
    """DatabaseManager over a fresh SQLite file with tables created."""
    from pdf_vault.core.db_client import DatabaseManager

    manager = DatabaseManager(
        f"sqlite+aiosqlite:///{tmp_path / 'metadata.sqlite'}", echo=False
    )
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def metadata_store(db_manager):
    from pdf_vault.services.document import DocumentCrudService

    return DocumentCrudService(db_manager)


@pytest.fixture
def document_service(blob_store, metadata_store):
    from pdf_vault.services.document import DocumentService

    return DocumentService(blob_store=blob_store, metadata_store=metadata_store)


# =============================================================================
# Mock Objects
# =============================================================================

@pytest.fixture
def mock_database_manager():
    """Create a mock DatabaseManager."""
    manager = Mock()
    manager.test_connection = AsyncMock(return_value=True)
    manager.create_tables = AsyncMock()
    manager.close = AsyncMock()
    return manager


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app(db_manager, document_service):
    """FastAPI application wired to the temporary stores."""
    # Import here to ensure test environment is set
    from pdf_vault.main import app as fastapi_app

    # ASGITransport does not run the lifespan, so wire state directly
    fastapi_app.state.db = db_manager
    fastapi_app.state.document_service = document_service
    return fastapi_app


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client
