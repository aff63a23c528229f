# ABOUTME: Document store protocols, merge semantics and the competition/exam/problem path scheme
# ABOUTME: Paths are competitions/{id}/exams/{year}/problems/{n}; consumers build the same strings

import copy
import re
from typing import Any, Protocol

COMPETITIONS_COLLECTION = "competitions"
EXAMS_COLLECTION = "exams"
PROBLEMS_COLLECTION = "problems"

_DOCUMENT_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class WriteError(Exception):
    """Raised when a batch fails to commit or would exceed the store's operation ceiling."""

    pass


def _checked_id(value: str | int) -> str:
    document_id = str(value)
    if not _DOCUMENT_ID.match(document_id):
        raise ValueError(f"Invalid document id: {document_id!r}")
    return document_id


def competition_path(competition_id: str) -> str:
    return f"{COMPETITIONS_COLLECTION}/{_checked_id(competition_id)}"


def exam_collection_path(competition_id: str) -> str:
    return f"{competition_path(competition_id)}/{EXAMS_COLLECTION}"


def exam_path(competition_id: str, year: int | str) -> str:
    return f"{exam_collection_path(competition_id)}/{_checked_id(year)}"


def problem_collection_path(competition_id: str, year: int | str) -> str:
    return f"{exam_path(competition_id, year)}/{PROBLEMS_COLLECTION}"


def problem_path(competition_id: str, year: int | str, problem_number: int | str) -> str:
    return f"{problem_collection_path(competition_id, year)}/{_checked_id(problem_number)}"


def split_path(path: str) -> tuple[str, str]:
    """Split a document path into (collection path, document id).

    Raises:
        ValueError: If the path does not name a document (odd number of segments)
    """
    segments = path.strip("/").split("/")
    if len(segments) % 2 != 0 or not all(segments):
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(segments[:-1]), segments[-1]


def merge_document(existing: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    """Merge ``update`` into ``existing``: nested maps merge key by key, everything else is replaced."""
    merged = copy.deepcopy(existing)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_document(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class WriteBatch(Protocol):
    """Writes applied atomically on commit."""

    def set(self, path: str, data: dict[str, Any]) -> None:
        """Queue a merge write of ``data`` at ``path``."""
        ...

    def __len__(self) -> int: ...

    async def commit(self) -> None:
        """Apply every queued write in one transaction.

        Raises:
            WriteError: If the transaction fails; nothing from this batch is applied
        """
        ...


class DocumentStore(Protocol):
    """A hierarchical, path-addressed document store with merge writes."""

    def batch(self, max_operations: int | None = None) -> WriteBatch: ...

    async def set(self, path: str, data: dict[str, Any]) -> None:
        """Merge-write a single document outside any batch."""
        ...

    async def get(self, path: str) -> dict[str, Any] | None: ...

    async def list_documents(self, collection_path: str) -> list[tuple[str, dict[str, Any]]]:
        """Return (document id, data) pairs directly inside ``collection_path``."""
        ...

    async def close(self) -> None: ...
