# ABOUTME: Shared extraction types: loaded page handle, page loader protocol and extraction errors
# ABOUTME: Pages are parsed with BeautifulSoup once and reused by every parsing stage

from dataclasses import dataclass, field
from typing import Protocol

from bs4 import BeautifulSoup, Tag


class FetchError(Exception):
    """Raised when a page cannot be loaded (navigation failure, timeout, non-2xx status)."""

    pass


class ExtractionError(Exception):
    """Raised when a loaded page lacks the content it is expected to hold."""

    pass


@dataclass
class DocumentHandle:
    """A loaded page: its final URL, raw HTML and lazily parsed tree."""

    url: str
    html: str
    status_code: int | None = None
    _soup: BeautifulSoup | None = field(default=None, init=False, repr=False, compare=False)

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self.html, "html.parser")
        return self._soup

    def content_root(self, selector: str = ".mw-parser-output") -> Tag:
        """Return the element holding the article body.

        Raises:
            ExtractionError: If the page has no element matching ``selector``
        """
        root = self.soup.select_one(selector)
        if root is None:
            raise ExtractionError(f"No content container '{selector}' on {self.url}")
        return root


class PageLoader(Protocol):
    """Anything that can turn a URL into a DocumentHandle."""

    async def load(self, url: str) -> DocumentHandle:
        """Load ``url`` and wait for its content to settle.

        Raises:
            FetchError: If navigation fails or the response is not successful
        """
        ...
