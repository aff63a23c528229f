# ABOUTME: High-level service API behind the CLI: crawl, load, verify and audit
# ABOUTME: Owns the browser session and store lifecycles so failures always release them

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import anyio
from sqlalchemy.engine import make_url

from mathcomp_ingest.config import Config, get_config
from mathcomp_ingest.core.competitions import get_competition
from mathcomp_ingest.core.models import CompetitionDump
from mathcomp_ingest.core.pipeline import CrawlPipeline, ProgressCallback
from mathcomp_ingest.core.report import CrawlReport, audit_store
from mathcomp_ingest.enrichment.topics import TopicClassifier, configure_classifier_lm
from mathcomp_ingest.extraction.fetcher import PageFetcher
from mathcomp_ingest.persistence import (
    BatchedStoreWriter,
    DocumentStore,
    SQLDocumentStore,
    WriteSummary,
    checkpoint_path,
    load_checkpoint,
    problem_path,
    save_checkpoint,
)
from mathcomp_ingest.utils.logging import get_logger


@dataclass
class CrawlOutcome:
    dump: CompetitionDump
    report: CrawlReport
    checkpoint: Path


def create_store(config: Config) -> DocumentStore:
    """Build the configured document store backend."""
    if config.store_backend == "firestore":
        from mathcomp_ingest.persistence.firestore_store import FirestoreDocumentStore

        return FirestoreDocumentStore(config.firebase_credentials)

    database = make_url(config.database_url).database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    return SQLDocumentStore(config.database_url)


class IngestionService:
    """Runs crawls and loads with explicit resource lifecycles."""

    def __init__(
        self,
        config: Config | None = None,
        store: DocumentStore | None = None,
        fetcher_factory: Callable[[Config], Any] = PageFetcher,
        classifier: TopicClassifier | None = None,
    ):
        self.config = config or get_config()
        self._store = store
        self.fetcher_factory = fetcher_factory
        self.classifier = classifier
        self.logger = get_logger(__name__)

    @asynccontextmanager
    async def open_store(self) -> AsyncIterator[DocumentStore]:
        """Yield the injected store, or a fresh one that is closed afterwards."""
        if self._store is not None:
            yield self._store
            return

        store = create_store(self.config)
        try:
            if isinstance(store, SQLDocumentStore):
                await store.create_tables()
            yield store
        finally:
            await store.close()

    async def crawl(
        self,
        competition_id: str,
        from_year: int | None = None,
        to_year: int | None = None,
        classify: bool = False,
        output: Path | None = None,
        deadline: float | None = None,
        progress: ProgressCallback | None = None,
    ) -> CrawlOutcome:
        """Crawl a competition and write its checkpoint file.

        Raises:
            KeyError: If the competition is unknown
            FetchError: If the competition index page cannot be loaded
            TimeoutError: If ``deadline`` seconds pass before the crawl finishes
        """
        competition = get_competition(competition_id)
        self.logger.info(
            "Starting crawl", competition_id=competition.id, from_year=from_year, to_year=to_year, deadline=deadline
        )

        async with self.fetcher_factory(self.config) as fetcher:
            pipeline = CrawlPipeline(fetcher, self.config, progress=progress)
            if deadline is not None:
                with anyio.fail_after(deadline):
                    dump, report = await pipeline.crawl(competition, from_year, to_year)
            else:
                dump, report = await pipeline.crawl(competition, from_year, to_year)

        if classify:
            dump = await self.classify(dump)

        path = save_checkpoint(dump, output or checkpoint_path(self.config.output_dir, competition.id))
        return CrawlOutcome(dump=dump, report=report, checkpoint=path)

    async def classify(self, dump: CompetitionDump) -> CompetitionDump:
        """Attach topic labels to every problem in the dump."""
        classifier = self.classifier
        if classifier is None:
            if not configure_classifier_lm(self.config):
                self.logger.warning("Skipping topic classification")
                return dump
            classifier = TopicClassifier(batch_size=self.config.classify_batch_size)

        exams = [
            exam.model_copy(update={"problems": await classifier.classify_problems(exam.problems)})
            for exam in dump.exams
        ]
        return dump.model_copy(update={"exams": exams})

    async def load(self, path: Path) -> tuple[CompetitionDump, WriteSummary]:
        """Write a checkpoint file into the document store.

        Raises:
            FileNotFoundError: If the checkpoint does not exist
            WriteError: If a batch fails to commit
        """
        dump = load_checkpoint(path)
        async with self.open_store() as store:
            writer = BatchedStoreWriter(
                store, threshold=self.config.batch_threshold, ceiling=self.config.batch_ceiling
            )
            summary = await writer.write_dump(dump)
        return dump, summary

    async def verify(self, competition_id: str, year: int, problem_number: int) -> dict[str, Any] | None:
        """Read one problem document back from the store."""
        path = problem_path(competition_id, year, problem_number)
        async with self.open_store() as store:
            document = await store.get(path)
        self.logger.info("Verified document", path=path, found=document is not None)
        return document

    async def audit(self, competition_id: str) -> CrawlReport:
        async with self.open_store() as store:
            return await audit_store(store, competition_id)
