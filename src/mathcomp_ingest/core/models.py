# ABOUTME: Domain models for crawled competition data: problems, solutions, exams and the checkpoint dump
# ABOUTME: Serialized with camelCase keys, the shape read by the practice UI and tutoring consumers

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

CHOICE_LETTERS = ("A", "B", "C", "D", "E")


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON while keeping snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """Plain dict with camelCase keys; absent optional fields are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Solution(CamelModel):
    """One titled solution block, e.g. "Solution 2"."""

    title: str = Field(description="Section heading as shown on the page")
    text: str = Field(default="", description="Plain text with math kept as $-delimited LaTeX")
    html: str = Field(default="", description="Portable markup with absolute resource URLs")


class VideoSolution(CamelModel):
    title: str = Field(description="Heading of the video section")
    url: str = Field(description="External video URL")


class Problem(CamelModel):
    """A single problem record addressed by its number within an exam."""

    problem_number: int = Field(ge=1, description="Problem number, the record's addressing key")
    problem_text: str = Field(default="", description="Problem statement as plain text")
    problem_html: str = Field(default="", description="Problem statement as portable markup")
    correct_answer: str = Field(default="", description="Choice letter A-E, empty when unresolved")

    # Legacy singular fields mirror the first solution
    solution_text: str = Field(default="", description="First solution text")
    solution_html: str = Field(default="", description="First solution markup")

    solutions: list[Solution] = Field(default_factory=list, description="All solutions in page order")
    video_solutions: list[VideoSolution] = Field(default_factory=list, description="Video solution links")
    choices: dict[str, str] | None = Field(default=None, description="Choice letter to choice text")
    topic: str | None = Field(default=None, description="Topic label(s), comma joined")
    source_url: str | None = Field(default=None, description="Page the record was crawled from")

    @field_validator("correct_answer")
    @classmethod
    def _check_answer(cls, value: str) -> str:
        value = value.strip().upper()
        if value and value not in CHOICE_LETTERS:
            raise ValueError(f"correct answer must be one of {', '.join(CHOICE_LETTERS)} or empty")
        return value

    @property
    def has_answer(self) -> bool:
        return bool(self.correct_answer)

    @property
    def has_complete_choices(self) -> bool:
        return bool(self.choices) and all(self.choices.get(letter) for letter in CHOICE_LETTERS)


def project_legacy_fields(problem: Problem) -> Problem:
    """Copy the first solution into the singular solutionText/solutionHtml fields."""
    first = problem.solutions[0] if problem.solutions else None
    return problem.model_copy(
        update={
            "solution_text": first.text if first else "",
            "solution_html": first.html if first else "",
        }
    )


class Exam(CamelModel):
    year: int = Field(description="Exam year, unique within a competition")
    problems: list[Problem] = Field(default_factory=list, description="Problems in ascending number order")

    @property
    def total_problems(self) -> int:
        return len(self.problems)


class CompetitionDump(CamelModel):
    """Checkpoint written between crawling and loading."""

    competition_id: str = Field(description="Competition identifier, e.g. amc8")
    competition_name: str = Field(description="Display name, e.g. AMC 8")
    exams: list[Exam] = Field(default_factory=list)

    @property
    def problem_count(self) -> int:
        return sum(exam.total_problems for exam in self.exams)

    def iter_problems(self):
        for exam in self.exams:
            for problem in exam.problems:
                yield exam, problem

