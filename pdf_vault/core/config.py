import json
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # FastAPI Configuration
    PROJECT_NAME: str = "PDF Vault"
    VERSION: str = "1.0.0"
    API_PREFIX: str = ""  # Routes live at /documents unless a prefix is set
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # Metadata store (SQLite by default, PostgreSQL via asyncpg URL)
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./database.sqlite",
        description="SQLAlchemy async database URL",
    )
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False  # SQL query logging
    CREATE_TABLES_ON_STARTUP: bool = True

    # Blob store
    STORAGE_BACKEND: str = Field(
        default="local", description="Blob store backend: 'local' or 'gcs'"
    )
    UPLOAD_DIR: str = "uploads"
    DOWNLOAD_CHUNK_SIZE: int = Field(default=64 * 1024, ge=1024)

    # Google Cloud Storage (only used when STORAGE_BACKEND=gcs)
    GCP_PROJECT_ID: Optional[str] = None
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None
    GCS_BUCKET_NAME: str = "pdf-vault-documents"
    GCS_PREFIX: str = ""  # Object name prefix within the bucket

    # CORS Settings
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]
    CORS_METHODS: List[str] = ["GET", "POST", "DELETE", "OPTIONS"]
    CORS_HEADERS: List[str] = ["*"]

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # json or text

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Only the local filesystem and GCS backends are supported."""
        v = v.strip().lower()
        if v not in ("local", "gcs"):
            raise ValueError("STORAGE_BACKEND must be 'local' or 'gcs'")
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or JSON array."""
        if isinstance(v, str):
            if v.startswith("["):
                return json.loads(v)
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("API_PREFIX")
    @classmethod
    def normalize_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = f"/{v}"
        return v

    @property
    def is_sqlite(self) -> bool:
        """Check if the metadata store is backed by SQLite."""
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_development(self) -> bool:
        """Check if the application is running in development mode."""
        return self.ENVIRONMENT.lower() in ["development", "dev", "local"]

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production mode."""
        return self.ENVIRONMENT.lower() in ["production", "prod"]


# Global settings instance
settings = Settings()
