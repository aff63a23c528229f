# ABOUTME: Batched store writer: header documents first, then problems in batches under the ceiling
# ABOUTME: Batches span exams, commit at the threshold and the final partial batch is always flushed

from dataclasses import dataclass, field

from mathcomp_ingest.core.models import CompetitionDump, Exam
from mathcomp_ingest.persistence.base import DocumentStore, WriteBatch, competition_path, exam_path, problem_path
from mathcomp_ingest.utils.logging import get_logger


@dataclass
class WriteSummary:
    """What one load wrote."""

    header_writes: int = 0
    documents_written: int = 0
    batch_sizes: list[int] = field(default_factory=list)

    @property
    def transactions(self) -> int:
        return len(self.batch_sizes)


class BatchedStoreWriter:
    """Writes exams and problems with merge semantics, never exceeding ``threshold`` writes per batch."""

    def __init__(self, store: DocumentStore, threshold: int = 400, ceiling: int = 500):
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        if threshold > ceiling:
            raise ValueError(f"threshold {threshold} exceeds the store ceiling {ceiling}")
        self.store = store
        self.threshold = threshold
        self.ceiling = ceiling
        self.logger = get_logger(__name__)

    async def _commit(self, batch: WriteBatch, summary: WriteSummary) -> None:
        size = len(batch)
        await batch.commit()
        summary.batch_sizes.append(size)
        summary.documents_written += size
        self.logger.info("Committed batch", operations=size, transaction=summary.transactions)

    async def write(self, competition_id: str, competition_name: str, exams: list[Exam]) -> WriteSummary:
        """Persist one competition's exams and problems.

        Raises:
            WriteError: If a batch fails; batches committed before it stay committed
        """
        summary = WriteSummary()

        await self.store.set(competition_path(competition_id), {"id": competition_id, "name": competition_name})
        summary.header_writes += 1
        for exam in exams:
            await self.store.set(
                exam_path(competition_id, exam.year), {"year": exam.year, "totalProblems": exam.total_problems}
            )
            summary.header_writes += 1

        batch = self.store.batch(max_operations=self.ceiling)
        for exam in exams:
            for problem in exam.problems:
                batch.set(problem_path(competition_id, exam.year, problem.problem_number), problem.to_document())
                if len(batch) >= self.threshold:
                    await self._commit(batch, summary)
                    batch = self.store.batch(max_operations=self.ceiling)

        if len(batch):
            await self._commit(batch, summary)

        self.logger.info(
            "Competition written",
            competition_id=competition_id,
            exams=len(exams),
            problems=summary.documents_written,
            transactions=summary.transactions,
        )
        return summary

    async def write_dump(self, dump: CompetitionDump) -> WriteSummary:
        return await self.write(dump.competition_id, dump.competition_name, dump.exams)
