# ABOUTME: Parsers for MediaWiki-rendered competition pages
# ABOUTME: Exposes the section segmenter, content normalizer and answer resolver

from .answers import AnswerResolver, AnswerSource, Resolution, parse_answer_key
from .normalizer import NormalizedContent, clean_math_text, normalize
from .segmenter import Section, SectionKind, segment

__all__ = [
    "AnswerResolver",
    "AnswerSource",
    "NormalizedContent",
    "Resolution",
    "Section",
    "SectionKind",
    "clean_math_text",
    "normalize",
    "parse_answer_key",
    "segment",
]
