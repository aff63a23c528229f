# ABOUTME: Converts section nodes into plain text (math kept as LaTeX) and portable HTML markup
# ABOUTME: Also unifies math delimiters on the dollar convention for downstream renderers

import copy
import re
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urljoin

from bs4 import Comment, NavigableString, PageElement, Tag

BLOCK_TAGS = {
    "p",
    "div",
    "center",
    "blockquote",
    "pre",
    "table",
    "tr",
    "dl",
    "dd",
    "dt",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
}
RESOURCE_ATTRIBUTES = ("src", "data-src")

_INLINE_PAREN_MATH = re.compile(r"\\\((.+?)\\\)", re.DOTALL)
_DISPLAY_BRACKET_MATH = re.compile(r"\\\[(.+?)\\\]", re.DOTALL)
# Escaped \$ is a literal dollar sign, never a delimiter
_DOLLAR_SPAN = re.compile(r"(?<!\\)\$\$(.+?)(?<!\\)\$\$|(?<!\\)\$((?:\\.|[^$\n\\])+?)\$", re.DOTALL)
_HORIZONTAL_SPACE = re.compile(r"[ \t\r\f\v\u00a0]+")
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


@dataclass(frozen=True)
class NormalizedContent:
    text: str
    markup: str


def is_math_image(node: Tag) -> bool:
    classes = node.get("class") or []
    return node.name == "img" and any("latex" in cls for cls in classes)


def render_text(node: PageElement) -> str:
    """Flatten a node to text: blocks on their own lines, lists prefixed, math images as their LaTeX."""
    if isinstance(node, Comment):
        return ""
    if isinstance(node, NavigableString):
        return str(node)
    if not isinstance(node, Tag):
        return ""

    if node.name == "img":
        return str(node.get("alt") or "") if is_math_image(node) else ""
    if node.name == "br":
        return "\n"
    if node.name in ("ul", "ol"):
        return _render_list(node)

    inner = "".join(render_text(child) for child in node.children)
    if node.name in BLOCK_TAGS:
        return "\n" + inner.strip() + "\n"
    return inner


def _render_list(node: Tag) -> str:
    try:
        number = int(node.get("start") or 1)
    except ValueError:
        number = 1

    lines = []
    for item in node.find_all("li", recursive=False):
        body = "".join(render_text(child) for child in item.children).strip()
        if node.name == "ol":
            lines.append(f"{number}. {body}")
            number += 1
        else:
            lines.append(f"• {body}")
    return "\n" + "\n".join(lines) + "\n"


def collapse_whitespace(text: str) -> str:
    lines = [_HORIZONTAL_SPACE.sub(" ", line).strip() for line in text.split("\n")]
    return _EXTRA_BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()


def _tidy_dollar_span(match: re.Match) -> str:
    if match.group(1) is not None:
        return f"$${match.group(1).strip()}$$"
    return f"${match.group(2).strip()}$"


def clean_math_text(text: str) -> str:
    """Rewrite \\(..\\) and \\[..\\] as $..$ and $$..$$, trimming spaces just inside the delimiters."""
    if not text:
        return ""
    text = _INLINE_PAREN_MATH.sub(lambda m: f"${m.group(1)}$", text)
    text = _DISPLAY_BRACKET_MATH.sub(lambda m: f"$${m.group(1)}$$", text)
    text = _DOLLAR_SPAN.sub(_tidy_dollar_span, text)
    return collapse_whitespace(text)


def absolutize(url: str, base_url: str) -> str:
    """Rewrite protocol-relative and root-relative references; leave anything else alone."""
    if url.startswith("//"):
        return "https:" + url
    if url.startswith("/"):
        return urljoin(base_url.rstrip("/") + "/", url)
    return url


def portable_markup(nodes: Iterable[PageElement], base_url: str) -> str:
    parts = []
    for node in nodes:
        if isinstance(node, Comment):
            continue
        if isinstance(node, NavigableString):
            if node.strip():
                parts.append(str(node).strip())
            continue
        if not isinstance(node, Tag):
            continue

        fragment = copy.copy(node)
        for tag in [fragment, *fragment.find_all(True)]:
            for attribute in RESOURCE_ATTRIBUTES:
                value = tag.get(attribute)
                if isinstance(value, str):
                    tag[attribute] = absolutize(value, base_url)
        parts.append(str(fragment))
    return "\n".join(parts)


def normalize(nodes: Iterable[PageElement], base_url: str = "https://artofproblemsolving.com") -> NormalizedContent:
    """Produce the text and portable markup forms of a section's nodes."""
    nodes = list(nodes)
    raw_text = "".join(render_text(node) for node in nodes)
    return NormalizedContent(text=clean_math_text(raw_text), markup=portable_markup(nodes, base_url))
