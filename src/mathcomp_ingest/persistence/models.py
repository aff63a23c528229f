# ABOUTME: SQLModel table backing the SQL document store
# ABOUTME: One row per document path with its JSON data and row-level timestamps

from datetime import UTC, datetime
from typing import Any

from sqlmodel import JSON, Column, Field, SQLModel


def utcnow() -> datetime:
    """Returns the current UTC timestamp."""

    return datetime.now(UTC)


class StoredDocument(SQLModel, table=True):
    """A document addressed by its full path, e.g. competitions/amc8/exams/2023."""

    __tablename__ = "document"  # type: ignore[assignment]

    path: str = Field(primary_key=True, description="Full document path")
    collection: str = Field(index=True, description="Path of the collection holding the document")
    document_id: str = Field(description="Last path segment")
    data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, description="Creation timestamp")
    updated_at: datetime = Field(default_factory=utcnow, description="Last modification timestamp")
