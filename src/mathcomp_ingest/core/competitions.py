# ABOUTME: Registry of supported competitions and link discovery on their wiki index and exam pages
# ABOUTME: Finds year pages, per-problem pages and the answer key link by anchor text and href patterns

import re
from dataclasses import dataclass
from urllib.parse import unquote, urljoin, urlparse

from mathcomp_ingest.extraction.base import DocumentHandle

_PROBLEM_HREF = re.compile(r"Problem_(\d+)/?$")
_ANSWER_KEY_TEXT = "answer key"


@dataclass(frozen=True)
class Competition:
    """A competition series as laid out on the wiki."""

    id: str
    name: str
    index_path: str
    year_pattern: re.Pattern
    problem_count: int

    def index_url(self, base_url: str) -> str:
        return urljoin(base_url.rstrip("/") + "/", self.index_path)

    def discover_years(
        self, doc: DocumentHandle, from_year: int | None = None, to_year: int | None = None
    ) -> dict[int, str]:
        """Map each exam year linked from the index page to its URL, ascending by year."""
        years: dict[int, str] = {}
        for anchor in doc.soup.find_all("a", href=True):
            match = self.year_pattern.search(anchor.get_text(" ", strip=True))
            if not match:
                continue
            year = int(match.group(1))
            if from_year is not None and year < from_year:
                continue
            if to_year is not None and year > to_year:
                continue
            years.setdefault(year, urljoin(doc.url, anchor["href"]))
        return dict(sorted(years.items()))

    def discover_problems(self, doc: DocumentHandle, year: int | None = None) -> dict[int, str]:
        """Map problem numbers 1..problem_count to their page URLs, ascending by number.

        Sub-pages of the exam page win over other same-year links, since navigation
        boxes also point at sibling exams.
        """
        exam_prefix = unquote(urlparse(doc.url).path).rstrip("/") + "/"
        own: dict[int, str] = {}
        same_year: dict[int, str] = {}
        for anchor in doc.soup.find_all("a", href=True):
            url = urljoin(doc.url, anchor["href"]).split("#", 1)[0]
            path = unquote(urlparse(url).path)
            match = _PROBLEM_HREF.search(path)
            if not match:
                continue
            number = int(match.group(1))
            if not 1 <= number <= self.problem_count:
                continue
            if path.startswith(exam_prefix):
                own.setdefault(number, url)
            elif year is None or str(year) in path:
                same_year.setdefault(number, url)

        problems = own or same_year
        return dict(sorted(problems.items()))

    def find_answer_key(self, doc: DocumentHandle) -> str | None:
        for anchor in doc.soup.find_all("a", href=True):
            if _ANSWER_KEY_TEXT in anchor.get_text(" ", strip=True).lower():
                return urljoin(doc.url, anchor["href"])
        return None


COMPETITIONS: dict[str, Competition] = {
    competition.id: competition
    for competition in (
        Competition(
            id="amc8",
            name="AMC 8",
            index_path="/wiki/index.php/AMC_8_Problems_and_Solutions",
            year_pattern=re.compile(r"(\d{4})\s+AMC\s*8(?!\d)"),
            problem_count=25,
        ),
        Competition(
            id="amc10a",
            name="AMC 10A",
            index_path="/wiki/index.php/AMC_10_Problems_and_Solutions",
            year_pattern=re.compile(r"(\d{4})\s+AMC\s*10\s*A\b"),
            problem_count=25,
        ),
        Competition(
            id="amc10b",
            name="AMC 10B",
            index_path="/wiki/index.php/AMC_10_Problems_and_Solutions",
            year_pattern=re.compile(r"(\d{4})\s+AMC\s*10\s*B\b"),
            problem_count=25,
        ),
        Competition(
            id="amc12a",
            name="AMC 12A",
            index_path="/wiki/index.php/AMC_12_Problems_and_Solutions",
            year_pattern=re.compile(r"(\d{4})\s+AMC\s*12\s*A\b"),
            problem_count=25,
        ),
        Competition(
            id="amc12b",
            name="AMC 12B",
            index_path="/wiki/index.php/AMC_12_Problems_and_Solutions",
            year_pattern=re.compile(r"(\d{4})\s+AMC\s*12\s*B\b"),
            problem_count=25,
        ),
        Competition(
            id="aime1",
            name="AIME I",
            index_path="/wiki/index.php/AIME_Problems_and_Solutions",
            # Single-exam years are listed as plain "AIME"
            year_pattern=re.compile(r"(\d{4})\s+AIME(?:\s+I)?(?![\sI]*I)"),
            problem_count=15,
        ),
        Competition(
            id="aime2",
            name="AIME II",
            index_path="/wiki/index.php/AIME_Problems_and_Solutions",
            year_pattern=re.compile(r"(\d{4})\s+AIME\s+II\b"),
            problem_count=15,
        ),
    )
}


def get_competition(competition_id: str) -> Competition:
    """Look up a competition by identifier.

    Raises:
        KeyError: If the identifier is unknown; the message lists the known ones
    """
    try:
        return COMPETITIONS[competition_id.lower()]
    except KeyError:
        raise KeyError(f"Unknown competition '{competition_id}'. Known: {', '.join(COMPETITIONS)}") from None
