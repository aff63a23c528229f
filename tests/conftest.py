# ABOUTME: Shared fixtures: wiki page builders, an in-memory page loader and an in-memory SQL document store
# ABOUTME: Page HTML mirrors the MediaWiki layout of the competition wiki, trimmed to what parsing reads

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from mathcomp_ingest.config import Config
from mathcomp_ingest.extraction.base import DocumentHandle, FetchError
from mathcomp_ingest.persistence.sql_store import SQLDocumentStore

BASE_URL = "https://artofproblemsolving.com"
WIKI = f"{BASE_URL}/wiki/index.php"

CHOICES_LATEX = (
    r"$\textbf{(A)}\ 1 \qquad\textbf{(B)}\ 2 \qquad\textbf{(C)}\ 3 \qquad\textbf{(D)}\ 4 \qquad\textbf{(E)}\ 5$"
)


def wiki_page(body: str) -> str:
    """Wrap article body markup in the page chrome around it."""
    return f"""<html><head><title>Page</title></head><body>
<div id="mw-head">Navigation</div>
<div id="content"><div id="mw-content-text"><div class="mw-parser-output">
{body}
</div></div></div>
<div class="printfooter">Retrieved from wiki</div>
</body></html>"""


def heading(title: str, level: int = 2) -> str:
    return (
        f'<h{level}><span class="mw-headline" id="{title.replace(" ", "_")}">{title}</span>'
        f'<span class="mw-editsection">[<a href="#">edit</a>]</span></h{level}>'
    )


def problem_page(
    statement: str = '<p>What is <img class="latex" alt="$1+1$" src="//latex.artofproblemsolving.com/a/b.png">?</p>',
    solutions: list[tuple[str, str]] | None = None,
    extra: str = "",
) -> str:
    """A problem page: Problem section, then one section per (title, body) pair, then See Also."""
    if solutions is None:
        solutions = [
            (
                "Solution 1",
                '<p>Adding gives 2, so the answer is <img class="latex" '
                r'alt="$\boxed{\textbf{(B)}\ 2}$" src="//latex.artofproblemsolving.com/c/d.png"></p>',
            )
        ]
    body = [
        '<div id="toc" class="toc"><div class="toctitle">Contents</div><ul><li>1 Problem</li></ul></div>',
        heading("Problem"),
        statement,
    ]
    for title, section_body in solutions:
        body.append(heading(title))
        body.append(section_body)
    body.append(extra)
    body.append(heading("See Also"))
    body.append('<table class="toccolours"><tr><td>2023 AMC 8 (Problems)</td></tr></table>')
    return wiki_page("\n".join(body))


def answer_key_page(letters: list[str]) -> str:
    items = "".join(f"<li>{letter}</li>" for letter in letters)
    return wiki_page(f"<ol>{items}</ol>")


def make_doc(html: str, url: str = f"{WIKI}/2023_AMC_8_Problems/Problem_1") -> DocumentHandle:
    return DocumentHandle(url=url, html=html, status_code=200)


class FakeLoader:
    """Serves canned HTML by URL; unknown URLs fail like a dead page."""

    def __init__(self, pages: dict[str, str]):
        self.pages = pages
        self.requested: list[str] = []

    async def load(self, url: str) -> DocumentHandle:
        self.requested.append(url)
        if url not in self.pages:
            raise FetchError(f"Navigation to {url} returned HTTP 404")
        return DocumentHandle(url=url, html=self.pages[url], status_code=200)


@pytest.fixture
def fast_config(tmp_path) -> Config:
    """Config with no pacing or backoff so crawls run instantly."""
    return Config(
        request_delay_seconds=0,
        retry_backoff_seconds=0,
        fetch_attempts=2,
        output_dir=tmp_path / "data",
        database_url="sqlite+aiosqlite:///:memory:",
        gemini_api_key="",
    )


@pytest_asyncio.fixture
async def sql_store():
    """SQL document store on a shared in-memory SQLite connection."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    store = SQLDocumentStore("sqlite+aiosqlite:///:memory:", engine=engine)
    await store.create_tables()

    yield store

    await store.close()
