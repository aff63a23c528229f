# ABOUTME: Resolves a problem's correct choice letter from the answer key page or the first solution
# ABOUTME: The answer key is authoritative; boxed answers and answer phrases are fallbacks in that order

import re
from dataclasses import dataclass
from enum import Enum

from mathcomp_ingest.extraction.base import DocumentHandle
from mathcomp_ingest.utils.logging import get_logger

logger = get_logger(__name__)

CHOICE_LETTERS = ("A", "B", "C", "D", "E")
MIN_LIST_ENTRIES = 5

# \boxed{B}, \boxed{(B)}, \boxed{\textbf{(B)} 12}, \boxed{\mathrm{(B)}\ 12}
BOXED_ANSWER = re.compile(
    r"\\boxed\s*\{\s*(?:\\(?:textbf|mathbf|text|mathrm)\s*\{\s*)?\(?\s*([A-E])\s*(?:\)|\}|~|\\|\s|$)",
    re.IGNORECASE,
)
# "The answer is (C)", "Answer: C", a line starting with "Answer C"
ANSWER_PHRASE = re.compile(
    r"(?i:answer\s+is|answer\s*:|^answer\s+)[\s~$]*(?:\\textbf\s*\{\s*)?\(?([A-E])\)?(?![A-Za-z])",
    re.MULTILINE,
)
# "Therefore (D)", "thus, E." but not "so A = 5"
CONCLUSION_PHRASE = re.compile(
    r"(?i:\b(?:therefore|thus|so|hence))[\s,~$]*(?:\\textbf\s*\{\s*)?\(?([A-E])\)?(?![A-Za-z0-9_])(?!\s*[=<>+\-*/^])"
)

_LIST_LETTER = re.compile(r"\(?\b([A-E])\b\)?")
_ANY_LETTER = re.compile(r"[A-E]")
_INLINE_KEY_ENTRY = re.compile(r"(\d+)\.\s*\(?([A-E])\b")


class AnswerSource(str, Enum):
    ANSWER_KEY = "answer_key"
    BOXED = "boxed"
    ANSWER_PHRASE = "answer_phrase"
    CONCLUSION = "conclusion"
    UNRESOLVED = "unresolved"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one problem's answer."""

    answer: str
    source: AnswerSource
    heuristic_answer: str = ""

    @property
    def resolved(self) -> bool:
        return bool(self.answer)

    @property
    def conflicting(self) -> bool:
        return (
            self.source == AnswerSource.ANSWER_KEY
            and bool(self.heuristic_answer)
            and self.heuristic_answer != self.answer
        )


def parse_answer_key(
    doc: DocumentHandle, content_selector: str = ".mw-parser-output", problem_count: int | None = None
) -> dict[int, str]:
    """Parse an answer key page into ``{problem_number: letter}``.

    The first ordered list is read item by item; if that yields fewer than five
    entries, "N. X" runs in the page text override the list entry by entry.

    Raises:
        ExtractionError: If the page has no content container
    """
    root = doc.content_root(content_selector)
    answers: dict[int, str] = {}

    first_list = root.find("ol")
    if first_list is not None:
        for number, item in enumerate(first_list.find_all("li", recursive=False), start=1):
            text = item.get_text(" ", strip=True)
            match = _LIST_LETTER.search(text) or _ANY_LETTER.search(text)
            if match:
                answers[number] = match.group(match.lastindex or 0)

    if len(answers) < MIN_LIST_ENTRIES:
        for number, letter in _INLINE_KEY_ENTRY.findall(root.get_text("\n")):
            answers[int(number)] = letter

    if problem_count is not None:
        answers = {n: letter for n, letter in answers.items() if 1 <= n <= problem_count}

    logger.info("Parsed answer key", url=doc.url, entries=len(answers))
    return dict(sorted(answers.items()))


def heuristic_answer(text: str, markup: str = "") -> tuple[str, AnswerSource]:
    """Find an answer letter in solution prose, trying each pattern in precedence order."""
    haystack = f"{text}\n{markup}" if markup else text
    for pattern, source in (
        (BOXED_ANSWER, AnswerSource.BOXED),
        (ANSWER_PHRASE, AnswerSource.ANSWER_PHRASE),
        (CONCLUSION_PHRASE, AnswerSource.CONCLUSION),
    ):
        match = pattern.search(haystack)
        if match:
            return match.group(1).upper(), source
    return "", AnswerSource.UNRESOLVED


class AnswerResolver:
    """Chooses a problem's answer: answer key entry first, then solution heuristics."""

    def resolve_detailed(
        self, problem_number: int, answer_key: dict[int, str] | None, text: str, markup: str = ""
    ) -> Resolution:
        guess, source = heuristic_answer(text, markup)
        key_answer = (answer_key or {}).get(problem_number, "").upper()

        if key_answer in CHOICE_LETTERS:
            resolution = Resolution(answer=key_answer, source=AnswerSource.ANSWER_KEY, heuristic_answer=guess)
            if resolution.conflicting:
                logger.warning(
                    "Answer key disagrees with solution text",
                    problem_number=problem_number,
                    key_answer=key_answer,
                    heuristic_answer=guess,
                    heuristic_source=source.value,
                )
            return resolution

        return Resolution(answer=guess, source=source, heuristic_answer=guess)

    def resolve(self, problem_number: int, answer_key: dict[int, str] | None, text: str, markup: str = "") -> str:
        """Return the answer letter, or an empty string when nothing matched."""
        return self.resolve_detailed(problem_number, answer_key, text, markup).answer
