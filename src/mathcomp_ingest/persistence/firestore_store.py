# ABOUTME: Document store backed by Cloud Firestore through firebase-admin
# ABOUTME: Blocking client calls run in a worker thread; every write uses merge=True

from pathlib import Path
from typing import Any

import anyio
import firebase_admin
from firebase_admin import credentials, firestore

from mathcomp_ingest.persistence.base import WriteError, split_path
from mathcomp_ingest.utils.logging import get_logger

FIRESTORE_BATCH_CEILING = 500


class FirestoreWriteBatch:
    """Wraps a Firestore WriteBatch, counting queued writes."""

    def __init__(self, client: Any, max_operations: int | None = FIRESTORE_BATCH_CEILING):
        self._client = client
        self._batch = client.batch()
        self.max_operations = max_operations
        self._count = 0

    def set(self, path: str, data: dict[str, Any]) -> None:
        split_path(path)
        self._batch.set(self._client.document(path), data, merge=True)
        self._count += 1

    def __len__(self) -> int:
        return self._count

    async def commit(self) -> None:
        if self.max_operations is not None and self._count > self.max_operations:
            raise WriteError(f"Batch holds {self._count} writes; Firestore allows {self.max_operations}")
        try:
            await anyio.to_thread.run_sync(self._batch.commit)
        except Exception as e:
            raise WriteError(f"Firestore batch of {self._count} writes failed: {e}") from e


class FirestoreDocumentStore:
    """Firestore-backed store; the client handle is created once per store."""

    def __init__(self, credentials_path: Path | None = None, client: Any = None):
        self.logger = get_logger(__name__)
        self._client = client or self._create_client(credentials_path)

    def _create_client(self, credentials_path: Path | None) -> Any:
        try:
            app = firebase_admin.get_app()
        except ValueError:
            cred = (
                credentials.Certificate(str(credentials_path))
                if credentials_path
                else credentials.ApplicationDefault()
            )
            app = firebase_admin.initialize_app(cred)
            self.logger.info(
                "Initialized Firebase app", credentials=str(credentials_path) if credentials_path else "default"
            )
        return firestore.client(app)

    def batch(self, max_operations: int | None = FIRESTORE_BATCH_CEILING) -> FirestoreWriteBatch:
        return FirestoreWriteBatch(self._client, max_operations)

    async def set(self, path: str, data: dict[str, Any]) -> None:
        split_path(path)
        reference = self._client.document(path)
        try:
            await anyio.to_thread.run_sync(lambda: reference.set(data, merge=True))
        except Exception as e:
            raise WriteError(f"Write to {path} failed: {e}") from e

    async def get(self, path: str) -> dict[str, Any] | None:
        snapshot = await anyio.to_thread.run_sync(self._client.document(path).get)
        return snapshot.to_dict() if snapshot.exists else None

    async def list_documents(self, collection_path: str) -> list[tuple[str, dict[str, Any]]]:
        def _stream() -> list[tuple[str, dict[str, Any]]]:
            return [
                (snapshot.id, snapshot.to_dict() or {})
                for snapshot in self._client.collection(collection_path.strip("/")).stream()
            ]

        documents = await anyio.to_thread.run_sync(_stream)
        return sorted(documents, key=lambda item: item[0])

    async def close(self) -> None:
        await anyio.to_thread.run_sync(self._client.close)
