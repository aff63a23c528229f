# ABOUTME: DSPy module that labels batches of problems with topics from a closed category set
# ABOUTME: Any unusable response or LLM failure labels the whole batch "General" instead of failing the run

import json
import re
from typing import cast

import dspy

from mathcomp_ingest.config import Config, get_config
from mathcomp_ingest.core.models import Problem
from mathcomp_ingest.utils.logging import get_logger, log_api_call
from mathcomp_ingest.utils.retry import LLMAPIError, llm_retry

TOPIC_CATEGORIES = ["Arithmetic", "Algebra", "Geometry", "Number Theory", "Counting"]
DEFAULT_TOPIC = "General"
MAX_PROBLEM_CHARS = 1500

_JSON_ARRAY = re.compile(r"\[.*\]", re.DOTALL)

logger = get_logger(__name__)


class ClassificationError(Exception):
    """Raised when a classifier response cannot be turned into one label per problem."""

    pass


class TopicClassificationSignature(dspy.Signature):
    """Classify each math competition problem into one or more of the given categories.

    Return ONLY a JSON array with exactly one entry per problem, in the order given.
    Each entry is a category name, or several category names joined with ", ".
    """

    categories: str = dspy.InputField(description="JSON array of the allowed category names")
    problems: str = dspy.InputField(description="Problem statements, numbered from 1")

    topics_json: str = dspy.OutputField(description='JSON array of labels, e.g. ["Algebra", "Geometry, Counting"]')


def configure_classifier_lm(config: Config | None = None) -> bool:
    """Point DSPy at Gemini when an API key is configured.

    Note: DSPy modules read the globally configured LM.
    """
    config = config or get_config()
    if not config.gemini_api_key:
        logger.warning("No Gemini API key found - topics will default to General")
        return False

    lm = dspy.LM(config.classifier_model, api_key=config.gemini_api_key)
    dspy.configure(lm=lm)
    logger.info("Configured DSPy for topic classification", model=config.classifier_model)
    return True


def parse_topics(response: str, expected: int) -> list[str]:
    """Pull the JSON array out of a response (code fences and chatter allowed around it).

    Raises:
        ClassificationError: If no array is found, it is not valid JSON, has the wrong
            length, or holds something other than strings / lists of strings
    """
    match = _JSON_ARRAY.search(response or "")
    if not match:
        raise ClassificationError("No JSON array in classifier response")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ClassificationError(f"Classifier response is not valid JSON: {e}") from e

    if not isinstance(data, list) or len(data) != expected:
        got = len(data) if isinstance(data, list) else type(data).__name__
        raise ClassificationError(f"Expected {expected} labels, got {got}")

    labels = []
    for item in data:
        if isinstance(item, str):
            label = item.strip()
        elif isinstance(item, list) and all(isinstance(part, str) for part in item):
            label = ", ".join(part.strip() for part in item if part.strip())
        else:
            raise ClassificationError(f"Unexpected label {item!r}")
        labels.append(label or DEFAULT_TOPIC)
    return labels


def format_problems(problem_texts: list[str]) -> str:
    return "\n\n".join(
        f"Problem {number}: {text[:MAX_PROBLEM_CHARS]}" for number, text in enumerate(problem_texts, start=1)
    )


class TopicClassifier(dspy.Module):
    """Labels problems with topics, one LLM call per batch."""

    def __init__(self, categories: list[str] | None = None, batch_size: int = 10):
        super().__init__()
        self.categories = categories or list(TOPIC_CATEGORIES)
        self.batch_size = batch_size
        self.classify = dspy.Predict(TopicClassificationSignature)

    @llm_retry(max_attempts=3)
    @log_api_call("dspy")
    async def _request(self, problems: str) -> str:
        result = await self.classify.acall(categories=json.dumps(self.categories), problems=problems)
        result = cast("TopicClassificationSignature", result)
        return result.topics_json

    async def aforward(self, problem_texts: list[str]) -> list[str]:
        """Return one label string per problem text, same order and length."""
        if not problem_texts:
            return []

        try:
            response = await self._request(format_problems(problem_texts))
            return parse_topics(response, len(problem_texts))
        except (ClassificationError, LLMAPIError) as e:
            logger.warning(
                "Topic classification failed, using default label",
                batch_size=len(problem_texts),
                error=str(e),
                error_type=type(e).__name__,
            )
            return [DEFAULT_TOPIC] * len(problem_texts)

    def forward(self, problem_texts: list[str]) -> list[str]:
        """Sync wrapper around aforward()."""
        import anyio

        return anyio.run(self.aforward, problem_texts)

    async def classify_problems(self, problems: list[Problem]) -> list[Problem]:
        """Return copies of ``problems`` with ``topic`` set, classifying ``batch_size`` at a time."""
        labelled: list[Problem] = []
        for start in range(0, len(problems), self.batch_size):
            batch = problems[start : start + self.batch_size]
            topics = await self.aforward([problem.problem_text for problem in batch])
            labelled.extend(
                problem.model_copy(update={"topic": topic}) for problem, topic in zip(batch, topics, strict=True)
            )
            logger.debug("Classified batch", start=start, size=len(batch))
        return labelled
