# ABOUTME: Crawl4AI-based page fetcher that reuses one browser session for a whole crawl
# ABOUTME: Waits for the wiki content container (or a grace period) before returning the page HTML

import json

from crawl4ai import AsyncWebCrawler, BrowserConfig, CacheMode, CrawlerRunConfig

from mathcomp_ingest.config import Config, get_config
from mathcomp_ingest.extraction.base import DocumentHandle, FetchError
from mathcomp_ingest.utils.logging import get_logger, log_api_call, suppress_library_output


class PageFetcher:
    """Sequential page loader backed by a single crawl4ai browser session.

    Use as an async context manager so the browser is always released:

        async with PageFetcher(config) as fetcher:
            doc = await fetcher.load(url)
    """

    def __init__(self, config: Config | None = None, session_id: str = "mathcomp-ingest"):
        self.config = config or get_config()
        self.session_id = session_id
        self.logger = get_logger(__name__)
        self._crawler: AsyncWebCrawler | None = None

    @property
    def is_open(self) -> bool:
        return self._crawler is not None

    async def open(self) -> None:
        if self._crawler is not None:
            return

        browser_cfg = BrowserConfig(headless=self.config.headless, user_agent=self.config.user_agent, verbose=False)
        crawler = AsyncWebCrawler(config=browser_cfg)
        with suppress_library_output():
            await crawler.start()
        self._crawler = crawler
        self.logger.info("Browser session started", headless=self.config.headless, session_id=self.session_id)

    async def close(self) -> None:
        if self._crawler is None:
            return

        crawler, self._crawler = self._crawler, None
        with suppress_library_output():
            await crawler.close()
        self.logger.info("Browser session closed", session_id=self.session_id)

    async def __aenter__(self) -> "PageFetcher":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _content_ready_script(self) -> str:
        # Ready once the content container exists, or once the grace period has elapsed
        selector = json.dumps(self.config.content_selector)
        grace_ms = int(self.config.content_grace_seconds * 1000)
        return f"js:() => document.querySelector({selector}) !== null || performance.now() > {grace_ms}"

    def _run_config(self) -> CrawlerRunConfig:
        return CrawlerRunConfig(
            cache_mode=CacheMode.BYPASS,
            session_id=self.session_id,
            page_timeout=int(self.config.page_timeout_seconds * 1000),
            wait_for=self._content_ready_script(),
            verbose=False,
        )

    @log_api_call("crawl4ai")
    async def load(self, url: str) -> DocumentHandle:
        """Navigate the shared session to ``url`` and return the settled page.

        Raises:
            FetchError: On navigation failure, timeout or a non-2xx status
        """
        if self._crawler is None:
            raise FetchError("Browser session is not open")

        try:
            with suppress_library_output():
                result = await self._crawler.arun(url=url, config=self._run_config())  # type: ignore[assignment]
        except Exception as e:
            self.logger.warning("Navigation raised", url=url, error=str(e), error_type=type(e).__name__)
            raise FetchError(f"Navigation to {url} failed: {e}") from e

        if not result or not result.success:  # type: ignore[attr-defined]
            error_message = getattr(result, "error_message", None) if result else "No result returned"
            raise FetchError(f"Navigation to {url} failed: {error_message}")

        status_code = getattr(result, "status_code", None)
        if status_code is not None and not 200 <= status_code < 300:
            raise FetchError(f"Navigation to {url} returned HTTP {status_code}")

        html = result.html or ""  # type: ignore[attr-defined]
        final_url = getattr(result, "redirected_url", None) or url
        self.logger.debug("Page loaded", url=final_url, status_code=status_code, html_length=len(html))
        return DocumentHandle(url=final_url, html=html, status_code=status_code)
