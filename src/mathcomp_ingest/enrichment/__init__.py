# ABOUTME: Optional enrichment of crawled records
# ABOUTME: Topic labels assigned by an LLM through DSPy

from .topics import DEFAULT_TOPIC, TOPIC_CATEGORIES, ClassificationError, TopicClassifier

__all__ = [
    "DEFAULT_TOPIC",
    "TOPIC_CATEGORIES",
    "ClassificationError",
    "TopicClassifier",
]
