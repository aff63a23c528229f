# ABOUTME: Business logic and orchestration layer
# ABOUTME: Pipeline Stage 2: parsed pages → Problem and Exam records, crawl reports

"""
Core Layer: Record assembly and crawl orchestration

This layer handles:
- Domain models and their camelCase JSON shape
- The competition registry and link discovery
- Record assembly, crawl pipeline and completion reports
- Service APIs used by the CLI

Data Flow: extraction/ output → Records → persistence/
"""

from .models import CompetitionDump, Exam, Problem, Solution, VideoSolution, project_legacy_fields

# Import service on-demand to avoid circular imports
# Use: from mathcomp_ingest.core.service import IngestionService

__all__ = [
    "CompetitionDump",
    "Exam",
    "Problem",
    "Solution",
    "VideoSolution",
    "project_legacy_fields",
]
