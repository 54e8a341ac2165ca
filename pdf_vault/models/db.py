"""SQLAlchemy ORM models for the metadata store."""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class DocumentModel(Base):
    """One row per stored document. Rows are never updated."""

    __tablename__ = "documents"
    # Ids are never reused, even after the highest row is deleted
    __table_args__ = {"sqlite_autoincrement": True}

    # 64-bit everywhere; SQLite needs the INTEGER spelling for AUTOINCREMENT
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    original_name: Mapped[str] = mapped_column(String(1024), nullable=False)
    stored_name: Mapped[str] = mapped_column(
        String(1024), nullable=False, unique=True, index=True
    )
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    def __repr__(self) -> str:
        return f"<DocumentModel(id={self.id}, stored_name='{self.stored_name}')>"

    def to_dict(self) -> Dict[str, Any]:
        created_at = self.created_at
        # SQLite drops tzinfo on the way back
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return {
            "id": self.id,
            "original_name": self.original_name,
            "stored_name": self.stored_name,
            "size": self.size,
            "created_at": created_at,
        }
