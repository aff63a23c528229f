# ABOUTME: Splits a wiki page body into titled sections using an ordered heading index
# ABOUTME: A section spans from its heading to the next heading of the same or higher level

import copy
import re
from dataclasses import dataclass, field
from enum import Enum

from bs4 import NavigableString, PageElement, Tag

from mathcomp_ingest.extraction.base import DocumentHandle
from mathcomp_ingest.utils.logging import get_logger

logger = get_logger(__name__)

HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}
SECTION_LEVEL = 2
MEDIA_TAGS = ["img", "iframe", "video"]

# Page furniture that never belongs to a section
UNWANTED_SELECTORS = [
    "#toc",
    ".toc",
    ".mw-editsection",
    ".printfooter",
    "#catlinks",
    "div.print",
    "table.toccolours",
    "script",
    "style",
]

DENYLISTED_TITLES = {
    "see also",
    "external links",
    "references",
    "annotated solutions",
    "email sent",
    "credits",
}

_EDIT_MARKER = re.compile(r"\[\s*edit\s*\]", re.IGNORECASE)


class SectionKind(str, Enum):
    PROBLEM = "problem"
    SOLUTION = "solution"
    VIDEO = "video"
    ANSWER_KEY = "answer_key"
    OTHER = "other"


@dataclass
class Section:
    """A titled run of sibling nodes taken from the page body."""

    title: str
    kind: SectionKind
    level: int
    nodes: list[PageElement] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not any(_has_content(node) for node in self.nodes)


def _has_content(node: PageElement) -> bool:
    if not isinstance(node, Tag):
        return bool(str(node).strip())
    if node.get_text(strip=True):
        return True
    # Math images and embeds carry content that get_text never sees
    if node.name in MEDIA_TAGS:
        return True
    return node.find(MEDIA_TAGS) is not None


@dataclass
class _HeadingEntry:
    position: int
    level: int
    title: str


def classify_title(title: str) -> SectionKind:
    """Map a section title onto a section kind; video beats solution beats problem."""
    lowered = title.lower()
    if "video" in lowered:
        return SectionKind.VIDEO
    if "solution" in lowered:
        return SectionKind.SOLUTION
    if "answer key" in lowered:
        return SectionKind.ANSWER_KEY
    if "problem" in lowered:
        return SectionKind.PROBLEM
    return SectionKind.OTHER


def clean_title(raw: str) -> str:
    title = _EDIT_MARKER.sub("", raw)
    return " ".join(title.split()).strip()


def is_denylisted(title: str) -> bool:
    return title.lower().rstrip(":").strip() in DENYLISTED_TITLES


def heading_level(node: PageElement) -> tuple[int, Tag] | None:
    """Return (level, heading tag) when ``node`` is a heading or a MediaWiki heading wrapper."""
    if not isinstance(node, Tag):
        return None
    if node.name in HEADING_TAGS:
        return HEADING_TAGS[node.name], node
    if node.name == "div" and "mw-heading" in (node.get("class") or []):
        inner = node.find(list(HEADING_TAGS))
        if isinstance(inner, Tag):
            return HEADING_TAGS[inner.name], inner
    return None


def _strip_unwanted(root: Tag) -> None:
    for selector in UNWANTED_SELECTORS:
        for node in root.select(selector):
            node.decompose()


def _build_heading_index(children: list[PageElement]) -> list[_HeadingEntry]:
    index = []
    for position, node in enumerate(children):
        found = heading_level(node)
        if found is None:
            continue
        level, heading = found
        index.append(_HeadingEntry(position=position, level=level, title=clean_title(heading.get_text(" "))))
    return index


def _section_end(index: list[_HeadingEntry], start: int, total_children: int) -> int:
    """Position of the first later heading at the same or a higher level, else end of body."""
    level = index[start].level
    for entry in index[start + 1 :]:
        if entry.level <= level:
            return entry.position
    return total_children


def segment(doc: DocumentHandle, content_selector: str = ".mw-parser-output") -> list[Section]:
    """Split the page body into ordered sections.

    Boundaries come from heading adjacency among the body's direct children, so a
    solution that mentions another solution's name in its prose cannot end early.

    Raises:
        ExtractionError: If the page has no content container
    """
    root = copy.copy(doc.content_root(content_selector))
    _strip_unwanted(root)

    children = [
        child
        for child in root.children
        if isinstance(child, Tag) or (isinstance(child, NavigableString) and child.strip())
    ]
    index = _build_heading_index(children)
    if not index:
        logger.debug("Page has no headings", url=doc.url)
        return []

    # Pages normally use second-level headings; fall back to the shallowest level present
    levels = {entry.level for entry in index}
    section_level = SECTION_LEVEL if SECTION_LEVEL in levels else min(levels)

    sections = []
    for i, entry in enumerate(index):
        if entry.level != section_level:
            continue
        if not entry.title or is_denylisted(entry.title):
            continue

        end = _section_end(index, i, len(children))
        sections.append(
            Section(
                title=entry.title,
                kind=classify_title(entry.title),
                level=entry.level,
                nodes=children[entry.position + 1 : end],
            )
        )

    logger.debug(
        "Segmented page",
        url=doc.url,
        sections=[section.title for section in sections],
    )
    return sections


def first_section(sections: list[Section], kind: SectionKind) -> Section | None:
    return next((section for section in sections if section.kind == kind), None)


def sections_of(sections: list[Section], kind: SectionKind) -> list[Section]:
    return [section for section in sections if section.kind == kind]
