# ABOUTME: Sequential crawl of one competition: index page, then each year, its answer key and problems
# ABOUTME: Failures are isolated per problem and per year so a bad page never aborts the whole crawl

from collections.abc import Callable

import anyio

from mathcomp_ingest.config import Config, get_config
from mathcomp_ingest.core.assembler import RecordAssembler
from mathcomp_ingest.core.competitions import Competition
from mathcomp_ingest.core.models import CompetitionDump, Exam, Problem
from mathcomp_ingest.core.report import AnswerConflict, CrawlReport, SkippedPage, UnresolvedAnswer
from mathcomp_ingest.extraction.base import DocumentHandle, ExtractionError, FetchError, PageLoader
from mathcomp_ingest.extraction.wiki.answers import parse_answer_key
from mathcomp_ingest.utils.logging import get_logger, log_pipeline_step, with_competition_context
from mathcomp_ingest.utils.retry import fetch_with_retry

ProgressCallback = Callable[[str], None]


class CrawlPipeline:
    """Crawls competition → year → problem in strict order over one page loader."""

    def __init__(
        self,
        loader: PageLoader,
        config: Config | None = None,
        assembler: RecordAssembler | None = None,
        progress: ProgressCallback | None = None,
    ):
        self.loader = loader
        self.config = config or get_config()
        self.assembler = assembler or RecordAssembler(
            base_url=self.config.base_url, content_selector=self.config.content_selector
        )
        self.progress = progress
        self.logger = get_logger(__name__)
        self._pages_loaded = 0

    async def _load(self, url: str, description: str) -> DocumentHandle:
        if self._pages_loaded and self.config.request_delay_seconds > 0:
            await anyio.sleep(self.config.request_delay_seconds)
        if self.progress:
            self.progress(description)

        self._pages_loaded += 1
        return await fetch_with_retry(
            self.loader,
            url,
            attempts=self.config.fetch_attempts,
            min_wait=self.config.retry_backoff_seconds,
        )

    async def crawl(
        self, competition: Competition, from_year: int | None = None, to_year: int | None = None
    ) -> tuple[CompetitionDump, CrawlReport]:
        """Crawl every exam year of ``competition`` within the optional inclusive range.

        Raises:
            FetchError: If the competition index page cannot be loaded
        """
        report = CrawlReport(competition_id=competition.id)
        dump = CompetitionDump(competition_id=competition.id, competition_name=competition.name)

        with with_competition_context(competition.id, from_year=from_year, to_year=to_year) as logger:
            index_doc = await self._load(competition.index_url(self.config.base_url), f"{competition.name} index")
            years = competition.discover_years(index_doc, from_year, to_year)
            logger.info("Discovered exam years", years=list(years))

            for year, url in years.items():
                try:
                    exam = await self.crawl_exam(competition, year, url, report)
                except (FetchError, ExtractionError) as e:
                    logger.error("Skipping exam year", year=year, url=url, error=str(e))
                    report.skipped_pages.append(SkippedPage(url=url, reason=str(e)))
                    continue

                if exam.problems:
                    dump.exams.append(exam)
                    report.exams_crawled += 1

            logger.info(
                "Crawl finished",
                exams=report.exams_crawled,
                problems=report.problems_crawled,
                completion_rate=round(report.completion_rate, 3),
            )
        return dump, report

    async def _load_answer_key(self, competition: Competition, year: int, url: str, report: CrawlReport) -> dict:
        try:
            key_doc = await self._load(url, f"{competition.name} {year} answer key")
            return parse_answer_key(key_doc, self.config.content_selector, competition.problem_count)
        except (FetchError, ExtractionError) as e:
            self.logger.warning("Answer key unavailable", year=year, url=url, error=str(e))
            report.skipped_pages.append(SkippedPage(url=url, reason=str(e)))
            return {}

    @log_pipeline_step("crawl_exam")
    async def crawl_exam(self, competition: Competition, year: int, url: str, report: CrawlReport) -> Exam:
        """Crawl one exam page and all of its problem pages.

        Raises:
            FetchError: If the exam page itself cannot be loaded
        """
        exam_doc = await self._load(url, f"{competition.name} {year}")
        problem_links = competition.discover_problems(exam_doc, year)
        if not problem_links:
            self.logger.warning("No problem links on exam page", year=year, url=url)

        key_url = competition.find_answer_key(exam_doc)
        answer_key = await self._load_answer_key(competition, year, key_url, report) if key_url else {}

        problems: list[Problem] = []
        for number, problem_url in problem_links.items():
            try:
                doc = await self._load(problem_url, f"{competition.name} {year} #{number}")
                assembled = self.assembler.assemble(doc, number, answer_key)
            except (FetchError, ExtractionError) as e:
                self.logger.error("Skipping problem", year=year, problem_number=number, url=problem_url, error=str(e))
                report.skipped_pages.append(SkippedPage(url=problem_url, reason=str(e)))
                continue

            problem, resolution = assembled.problem, assembled.resolution
            report.problems_crawled += 1
            if resolution.resolved:
                report.problems_with_answers += 1
            else:
                report.unresolved.append(UnresolvedAnswer(year=year, problem_number=number, url=problem_url))
            if resolution.conflicting:
                report.conflicts.append(
                    AnswerConflict(
                        year=year,
                        problem_number=number,
                        key_answer=resolution.answer,
                        heuristic_answer=resolution.heuristic_answer,
                    )
                )
            if problem.has_complete_choices:
                report.problems_with_choices += 1
            problems.append(problem)

        self.logger.info(
            "Exam crawled",
            year=year,
            problems=len(problems),
            answer_key_entries=len(answer_key),
        )
        return Exam(year=year, problems=problems)
