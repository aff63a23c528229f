# ABOUTME: Document store on an async SQLAlchemy engine (aiosqlite by default)
# ABOUTME: Each batch commits in one transaction; writes merge into existing documents

from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

from mathcomp_ingest.persistence.base import WriteError, merge_document, split_path
from mathcomp_ingest.persistence.models import StoredDocument, utcnow
from mathcomp_ingest.utils.logging import get_logger


class SQLWriteBatch:
    """Queued merge writes applied in a single transaction."""

    def __init__(self, store: "SQLDocumentStore", max_operations: int | None = None):
        self._store = store
        self.max_operations = max_operations
        self._writes: list[tuple[str, dict[str, Any]]] = []
        self._committed = False

    def set(self, path: str, data: dict[str, Any]) -> None:
        split_path(path)
        self._writes.append((path, data))

    def __len__(self) -> int:
        return len(self._writes)

    async def commit(self) -> None:
        if self._committed:
            raise WriteError("Batch already committed")
        if self.max_operations is not None and len(self._writes) > self.max_operations:
            raise WriteError(f"Batch holds {len(self._writes)} writes; the store allows {self.max_operations}")

        async with self._store.async_session() as session:
            try:
                for path, data in self._writes:
                    await self._store.merge_into(session, path, data)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise WriteError(f"Batch of {len(self._writes)} writes failed: {e}") from e

        self._committed = True


class SQLDocumentStore:
    """Path-addressed document store persisted in a single SQL table."""

    def __init__(self, database_url: str = "sqlite+aiosqlite:///./data/mathcomp_ingest.db", engine=None):
        self.database_url = database_url
        self.logger = get_logger(__name__)
        self.engine = engine or create_async_engine(database_url, echo=False)
        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def merge_into(self, session: AsyncSession, path: str, data: dict[str, Any]) -> None:
        """Merge ``data`` into the document at ``path`` inside an open session."""
        collection, document_id = split_path(path)
        row = await session.get(StoredDocument, path)
        if row is None:
            row = StoredDocument(
                path=path, collection=collection, document_id=document_id, data=merge_document({}, data)
            )
        else:
            # Reassign so the JSON column is flagged dirty
            row.data = merge_document(row.data or {}, data)
            row.updated_at = utcnow()
        session.add(row)
        await session.flush()

    def batch(self, max_operations: int | None = None) -> SQLWriteBatch:
        return SQLWriteBatch(self, max_operations)

    async def set(self, path: str, data: dict[str, Any]) -> None:
        async with self.async_session() as session:
            try:
                await self.merge_into(session, path, data)
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise WriteError(f"Write to {path} failed: {e}") from e

    async def get(self, path: str) -> dict[str, Any] | None:
        async with self.async_session() as session:
            row = await session.get(StoredDocument, path)
            return dict(row.data) if row else None

    async def list_documents(self, collection_path: str) -> list[tuple[str, dict[str, Any]]]:
        async with self.async_session() as session:
            result = await session.exec(
                select(StoredDocument)
                .where(StoredDocument.collection == collection_path.strip("/"))
                .order_by(StoredDocument.document_id)
            )
            return [(row.document_id, dict(row.data)) for row in result.all()]

    async def count_documents(self, path_prefix: str = "") -> int:
        """Count documents whose path starts with ``path_prefix``."""
        async with self.async_session() as session:
            statement = select(func.count()).select_from(StoredDocument)
            if path_prefix:
                statement = statement.where(StoredDocument.path.startswith(path_prefix))  # type: ignore[attr-defined]
            result = await session.exec(statement)
            return int(result.one())

    async def close(self) -> None:
        await self.engine.dispose()
