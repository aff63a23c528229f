# ABOUTME: Document stores, batched writer and crawl checkpoint files
# ABOUTME: Pipeline Stage 3: Problem records → hierarchical document store with merge writes

"""
Persistence Layer: Save crawled records

This layer handles:
- Path-addressed document stores (SQL via SQLModel, Firestore via firebase-admin)
- Batched merge writes under a per-transaction operation ceiling
- JSON checkpoints between crawling and loading

Data Flow: core/ records → checkpoint file → document store
"""

from .base import DocumentStore, WriteBatch, WriteError, competition_path, exam_path, problem_path
from .checkpoint import checkpoint_path, load_checkpoint, save_checkpoint
from .sql_store import SQLDocumentStore
from .writer import BatchedStoreWriter, WriteSummary

__all__ = [
    "BatchedStoreWriter",
    "DocumentStore",
    "SQLDocumentStore",
    "WriteBatch",
    "WriteError",
    "WriteSummary",
    "checkpoint_path",
    "competition_path",
    "exam_path",
    "load_checkpoint",
    "problem_path",
    "save_checkpoint",
]
