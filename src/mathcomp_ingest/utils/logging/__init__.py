# ABOUTME: Logging configuration, progress tracking, and context helpers
# ABOUTME: Provides rich console progress and structured logging for the crawl pipeline

from .config import LoggingMode, configure_logging, get_logging_status, suppress_library_output
from .progress import CrawlProgressTracker, create_crawl_progress
from .utils import (
    LogContext,
    generate_operation_id,
    get_logger,
    log_api_call,
    log_pipeline_step,
    with_competition_context,
    with_pipeline_context,
)

__all__ = [
    # Configuration
    "LoggingMode",
    "configure_logging",
    "get_logging_status",
    "suppress_library_output",
    # Progress
    "CrawlProgressTracker",
    "create_crawl_progress",
    # Utilities
    "LogContext",
    "generate_operation_id",
    "get_logger",
    "log_api_call",
    "log_pipeline_step",
    "with_competition_context",
    "with_pipeline_context",
]
