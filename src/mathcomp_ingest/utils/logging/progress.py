# ABOUTME: Spinner progress display for long-running crawls using Rich
# ABOUTME: The tracker doubles as the pipeline's progress callback so the CLI can show the current page

from typing import Any

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn


class CrawlProgressTracker:
    """Updates a Rich spinner task as the crawl advances."""

    def __init__(self, progress: Progress, task_id: Any):
        self.progress = progress
        self.task_id = task_id
        self.pages = 0

    def __call__(self, description: str) -> None:
        self.pages += 1
        self.progress.update(self.task_id, description=f"[cyan]{description}[/cyan] [dim]({self.pages} pages)[/dim]")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass


def create_crawl_progress(
    console: Console, initial_description: str = "Opening browser session..."
) -> tuple[Progress, Any, CrawlProgressTracker]:
    """Create a spinner progress display for a crawl.

    Args:
        console: Rich console instance
        initial_description: Initial progress description

    Returns:
        Tuple of (progress, task_id, tracker)
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )

    task_id = progress.add_task(initial_description, total=None)
    tracker = CrawlProgressTracker(progress, task_id)

    return progress, task_id, tracker
