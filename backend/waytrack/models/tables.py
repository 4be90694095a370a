"""SQLAlchemy ORM models — the SQL document store table."""

from datetime import datetime
from sqlalchemy import String, DateTime, JSON, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from waytrack.database import Base


# ── Documents ────────────────────────────────────────────────────

class Document(Base):
    """One schemaless document of a named collection (users_v3, archives_v3, ...)."""
    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("collection", "doc_id"),
        Index("idx_documents_collection", "collection"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    collection: Mapped[str] = mapped_column(String(100), nullable=False)
    doc_id: Mapped[str] = mapped_column(String(200), nullable=False)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
