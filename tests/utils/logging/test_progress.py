# ABOUTME: Tests for the crawl progress spinner
# ABOUTME: The tracker is the pipeline's progress callback, so it must count pages and update the task

from rich.console import Console
from rich.progress import Progress

from mathcomp_ingest.utils.logging.progress import CrawlProgressTracker, create_crawl_progress


class TestCreateCrawlProgress:
    def test_creates_progress_and_tracker(self):
        progress, task_id, tracker = create_crawl_progress(Console(), "🕷️ Starting...")

        assert isinstance(progress, Progress)
        assert isinstance(tracker, CrawlProgressTracker)
        assert tracker.task_id == task_id
        assert progress.tasks[0].description == "🕷️ Starting..."

    def test_tracker_counts_pages(self):
        progress, task_id, tracker = create_crawl_progress(Console())

        tracker("AMC 8 index")
        tracker("AMC 8 2023")

        assert tracker.pages == 2
        description = progress.tasks[0].description
        assert "AMC 8 2023" in description
        assert "2 pages" in description

    def test_context_manager(self):
        _progress, _task_id, tracker = create_crawl_progress(Console())

        with tracker as ctx_tracker:
            assert ctx_tracker is tracker
