# ABOUTME: Builds one Problem record from a problem page: statement, solutions, videos, choices and answer
# ABOUTME: The legacy singular solution fields are filled by an explicit projection after assembly

import re
from dataclasses import dataclass

from bs4 import PageElement, Tag

from mathcomp_ingest.core.models import CHOICE_LETTERS, Problem, Solution, VideoSolution, project_legacy_fields
from mathcomp_ingest.extraction.base import DocumentHandle
from mathcomp_ingest.extraction.wiki.answers import AnswerResolver, Resolution
from mathcomp_ingest.extraction.wiki.normalizer import clean_math_text, normalize, render_text
from mathcomp_ingest.extraction.wiki.segmenter import Section, SectionKind, first_section, segment, sections_of
from mathcomp_ingest.utils.logging import get_logger

logger = get_logger(__name__)

VIDEO_HOSTS = re.compile(r"(?:youtube\.com|youtu\.be|vimeo\.com)", re.IGNORECASE)

_LATEX_LABEL = r"\\(?:textbf|mathrm|text|mathbf)\s*\{\s*\(([A-E])\)\s*\}"
_CHOICE_RUN = re.compile(
    _LATEX_LABEL + r"(.*?)(?=\\(?:textbf|mathrm|text|mathbf)\s*\{\s*\([A-E]\)|\$|\n|\Z)",
    re.DOTALL,
)
_LATEX_SPACING = re.compile(r"\\q?quad|\\[ ,;!]|~")


@dataclass(frozen=True)
class AssembledProblem:
    problem: Problem
    resolution: Resolution


def find_video_links(section: Section) -> list[str]:
    """Distinct video URLs from anchors and embedded players in a section, in page order."""
    urls: list[str] = []
    for node in section.nodes:
        if not isinstance(node, Tag):
            continue
        candidates = [node] if node.name in ("a", "iframe") else []
        candidates.extend(node.find_all(["a", "iframe"]))
        for candidate in candidates:
            url = candidate.get("href") or candidate.get("src") or ""
            if url.startswith("//"):
                url = "https:" + url
            if VIDEO_HOSTS.search(url) and url not in urls:
                urls.append(url)
    return urls


def _choices_from_list(nodes: list[PageElement]) -> dict[str, str]:
    for node in nodes:
        if not isinstance(node, Tag):
            continue
        ordered = node if node.name == "ol" else node.find("ol")
        if ordered is None:
            continue
        items = ordered.find_all("li", recursive=False)
        texts = [clean_math_text("".join(render_text(child) for child in item.children)) for item in items]
        return {letter: text for letter, text in zip(CHOICE_LETTERS, texts, strict=False) if text}
    return {}


def _choices_from_latex(text: str) -> dict[str, str]:
    choices: dict[str, str] = {}
    for letter, raw in _CHOICE_RUN.findall(text):
        value = _LATEX_SPACING.sub(" ", raw).strip()
        if value and letter not in choices:
            choices[letter] = f"${value}$"
    return choices


def extract_choices(problem_section: Section | None, problem_text: str) -> dict[str, str] | None:
    """Choice letter to text, from the statement's ordered list or its \\textbf{(X)} runs."""
    choices = _choices_from_list(problem_section.nodes) if problem_section else {}
    if not choices:
        choices = _choices_from_latex(problem_text)
    return {letter: choices[letter] for letter in CHOICE_LETTERS if letter in choices} or None


class RecordAssembler:
    """Combines segmenter, normalizer and resolver output into Problem records."""

    def __init__(
        self,
        base_url: str = "https://artofproblemsolving.com",
        content_selector: str = ".mw-parser-output",
        resolver: AnswerResolver | None = None,
    ):
        self.base_url = base_url
        self.content_selector = content_selector
        self.resolver = resolver or AnswerResolver()

    def assemble(
        self, doc: DocumentHandle, problem_number: int, answer_key: dict[int, str] | None = None
    ) -> AssembledProblem:
        """Assemble the record for one problem page.

        Raises:
            ExtractionError: If the page has no content container
        """
        sections = segment(doc, self.content_selector)

        problem_section = first_section(sections, SectionKind.PROBLEM)
        if problem_section is None:
            logger.warning("Problem page has no Problem section", url=doc.url, problem_number=problem_number)
            statement = normalize([], self.base_url)
        else:
            statement = normalize(problem_section.nodes, self.base_url)

        solutions = []
        for section in sections_of(sections, SectionKind.SOLUTION):
            if section.is_empty:
                continue
            content = normalize(section.nodes, self.base_url)
            solutions.append(Solution(title=section.title, text=content.text, html=content.markup))

        videos = [
            VideoSolution(title=section.title, url=url)
            for section in sections_of(sections, SectionKind.VIDEO)
            for url in find_video_links(section)
        ]

        first = solutions[0] if solutions else None
        resolution = self.resolver.resolve_detailed(
            problem_number, answer_key, first.text if first else "", first.html if first else ""
        )

        problem = project_legacy_fields(
            Problem(
                problem_number=problem_number,
                problem_text=statement.text,
                problem_html=statement.markup,
                correct_answer=resolution.answer,
                solutions=solutions,
                video_solutions=videos,
                choices=extract_choices(problem_section, statement.text),
                source_url=doc.url,
            )
        )

        logger.debug(
            "Problem assembled",
            problem_number=problem_number,
            solutions=len(solutions),
            videos=len(videos),
            answer=resolution.answer or None,
            answer_source=resolution.source.value,
        )
        return AssembledProblem(problem=problem, resolution=resolution)
