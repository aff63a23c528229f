# ABOUTME: Crawl report and completion audits over crawled dumps or the document store
# ABOUTME: Counts problems, resolved answers and complete choices; lists unresolved answers and key conflicts

from typing import Any

from pydantic import BaseModel, Field

from mathcomp_ingest.core.models import CHOICE_LETTERS, CompetitionDump
from mathcomp_ingest.persistence.base import DocumentStore, exam_collection_path, problem_collection_path
from mathcomp_ingest.utils.logging import get_logger

logger = get_logger(__name__)

MISSING_ANSWER_PREVIEW = 10


class UnresolvedAnswer(BaseModel):
    year: int
    problem_number: int
    url: str | None = None

    def label(self) -> str:
        return f"{self.year} #{self.problem_number}"


class AnswerConflict(BaseModel):
    year: int
    problem_number: int
    key_answer: str
    heuristic_answer: str


class SkippedPage(BaseModel):
    url: str
    reason: str


class CrawlReport(BaseModel):
    """Totals gathered while crawling or auditing one competition."""

    competition_id: str
    exams_crawled: int = 0
    problems_crawled: int = 0
    problems_with_answers: int = 0
    problems_with_choices: int = 0
    unresolved: list[UnresolvedAnswer] = Field(default_factory=list)
    conflicts: list[AnswerConflict] = Field(default_factory=list)
    skipped_pages: list[SkippedPage] = Field(default_factory=list)

    @property
    def completion_rate(self) -> float:
        if not self.problems_crawled:
            return 0.0
        return self.problems_with_answers / self.problems_crawled

    def missing_answer_preview(self, limit: int = MISSING_ANSWER_PREVIEW) -> list[str]:
        return [entry.label() for entry in self.unresolved[:limit]]

    def summary(self) -> dict[str, str]:
        data = {
            "Competition": self.competition_id,
            "Exams": str(self.exams_crawled),
            "Problems": str(self.problems_crawled),
            "With answers": str(self.problems_with_answers),
            "With complete choices": str(self.problems_with_choices),
            "Completion rate": f"{self.completion_rate:.1%}",
            "Answer conflicts": str(len(self.conflicts)),
            "Skipped pages": str(len(self.skipped_pages)),
        }
        if self.unresolved:
            preview = ", ".join(self.missing_answer_preview())
            more = len(self.unresolved) - MISSING_ANSWER_PREVIEW
            data["Missing answers"] = preview + (f" (+{more} more)" if more > 0 else "")
        return data


def _has_complete_choices(choices: dict | None) -> bool:
    return bool(choices) and all(choices.get(letter) for letter in CHOICE_LETTERS)


def completion_report(dump: CompetitionDump) -> CrawlReport:
    """Recompute totals from a checkpoint dump."""
    report = CrawlReport(competition_id=dump.competition_id, exams_crawled=len(dump.exams))
    for exam, problem in dump.iter_problems():
        report.problems_crawled += 1
        if problem.has_answer:
            report.problems_with_answers += 1
        else:
            report.unresolved.append(
                UnresolvedAnswer(year=exam.year, problem_number=problem.problem_number, url=problem.source_url)
            )
        if problem.has_complete_choices:
            report.problems_with_choices += 1
    return report


async def audit_store(store: DocumentStore, competition_id: str) -> CrawlReport:
    """Recompute totals by reading the competition back from the store.

    Documents whose ids are not numbers are not exams or problems of this scheme and are skipped.
    """
    report = CrawlReport(competition_id=competition_id)
    exams = await store.list_documents(exam_collection_path(competition_id))

    for year, year_id, _exam in _numbered(exams, exam_collection_path(competition_id)):
        report.exams_crawled += 1
        collection = problem_collection_path(competition_id, year_id)
        problems = await store.list_documents(collection)
        for number, _number_id, data in _numbered(problems, collection):
            report.problems_crawled += 1
            if data.get("correctAnswer"):
                report.problems_with_answers += 1
            else:
                report.unresolved.append(
                    UnresolvedAnswer(year=year, problem_number=number, url=data.get("sourceUrl"))
                )
            if _has_complete_choices(data.get("choices")):
                report.problems_with_choices += 1

    return report


def _numbered(
    documents: list[tuple[str, dict[str, Any]]], collection: str
) -> list[tuple[int, str, dict[str, Any]]]:
    numbered = []
    for document_id, data in documents:
        if not document_id.isdigit():
            logger.warning("Skipping non-numeric document", collection=collection, document_id=document_id)
            continue
        numbered.append((int(document_id), document_id, data))
    return sorted(numbered, key=lambda item: item[0])
