# ABOUTME: Rich table builders for crawl reports, load summaries, stored problems and settings
# ABOUTME: Keeps CLI output styling in one place

from typing import Any

from rich.box import ROUNDED, SIMPLE
from rich.console import Console
from rich.table import Table


def create_key_value_table(
    title: str,
    data: dict[str, str],
    title_style: str = "bold cyan",
    key_style: str = "bold blue",
    value_style: str = "green",
    box_style=ROUNDED,
) -> Table:
    """Create a two-column Field/Value table.

    Args:
        title: Table title
        data: Dictionary of key-value pairs to display
        title_style: Style for the table title
        key_style: Style for the key column
        value_style: Style for the value column
        box_style: Border style for the table

    Returns:
        Formatted Rich table ready for printing
    """
    table = Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=box_style,
        show_header=True,
        header_style="bold magenta",
        border_style="cyan",
        title_justify="left",
        expand=False,
    )

    table.add_column("Field", style=key_style, no_wrap=False)
    table.add_column("Value", style=value_style, no_wrap=False)

    for key, value in data.items():
        table.add_row(key, str(value))

    return table


def create_multi_column_table(
    title: str,
    columns: list[tuple[str, str]],
    rows: list[list[str]],
    title_style: str = "bold cyan",
    header_style: str = "bold magenta",
    alternate_row_styles: list[str] | None = None,
    box_style=ROUNDED,
) -> Table:
    """Create a multi-column table with zebra striping.

    Args:
        title: Table title
        columns: List of (column_name, column_style) tuples
        rows: List of row data
        title_style: Style for the table title
        header_style: Style for column headers
        alternate_row_styles: Alternating row styles
        box_style: Border style for the table
    """
    table = Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=box_style,
        show_header=True,
        header_style=header_style,
        border_style="cyan",
        title_justify="left",
        row_styles=alternate_row_styles or ["", "dim"],
        expand=True,
    )

    for name, style in columns:
        table.add_column(name, style=style)

    for row in rows:
        table.add_row(*row)

    return table


def _rate_style(rate: float) -> str:
    percentage = f"{rate:.1%}"
    if rate >= 0.95:
        return f"[bold green]{percentage}[/bold green] ✅"
    if rate >= 0.8:
        return f"[bold yellow]{percentage}[/bold yellow] ⚠️"
    return f"[bold red]{percentage}[/bold red] ❌"


def create_crawl_report_table(report: Any, title: str = "📚 Crawl Summary") -> Table:
    """Totals, completion rate and the first missing answers of a CrawlReport."""
    data = report.summary()
    data["Completion rate"] = _rate_style(report.completion_rate)

    return create_key_value_table(
        title=title,
        data=data,
        title_style="bold green",
        key_style="cyan",
        value_style="white",
    )


def create_conflicts_table(conflicts: list[Any]) -> Table:
    rows = [
        [str(c.year), str(c.problem_number), c.key_answer, c.heuristic_answer]
        for c in conflicts
    ]
    return create_multi_column_table(
        title="⚖️ Answer Key Conflicts",
        columns=[("Year", "cyan"), ("Problem", "white"), ("Answer key", "green"), ("Solution text", "yellow")],
        rows=rows,
    )


def create_write_summary_table(summary: Any, competition_id: str) -> Table:
    data = {
        "🏷️ Competition": competition_id,
        "📄 Header documents": str(summary.header_writes),
        "🧮 Problem documents": str(summary.documents_written),
        "📦 Transactions": str(summary.transactions),
        "📏 Batch sizes": ", ".join(str(size) for size in summary.batch_sizes) or "-",
    }
    return create_key_value_table(
        title="💾 Load Summary",
        data=data,
        title_style="bold green",
        key_style="cyan",
        value_style="white",
        box_style=SIMPLE,
    )


def create_problem_table(document: dict[str, Any], path: str) -> Table:
    """Field presence overview of one stored problem document."""

    def _present(value: Any) -> str:
        return "✅" if value else "❌"

    def _truncate(text: str, length: int) -> str:
        return text[:length] + "..." if len(text) > length else text

    data = {
        "📍 Path": path,
        "🔢 Problem": str(document.get("problemNumber", "?")),
        "📝 Statement": _truncate(document.get("problemText", ""), 160) or "❌",
        "🔤 Choices": ", ".join(sorted(document.get("choices") or {})) or "❌",
        "🎯 Correct answer": document.get("correctAnswer") or "❌",
        "💡 Solution text": _present(document.get("solutionText")),
        "📚 Solutions": str(len(document.get("solutions") or [])),
        "🎬 Video solutions": str(len(document.get("videoSolutions") or [])),
        "🏷️ Topic": document.get("topic") or "-",
    }
    return create_key_value_table(
        title="🔍 Stored Problem",
        data=data,
        title_style="bold yellow",
        key_style="bold blue",
        value_style="white",
    )


def create_competitions_table(competitions: list[Any]) -> Table:
    rows = [[c.id, c.name, str(c.problem_count), c.index_path] for c in competitions]
    return create_multi_column_table(
        title="🏆 Competitions",
        columns=[("ID", "cyan"), ("Name", "white"), ("Problems", "yellow"), ("Index page", "dim white")],
        rows=rows,
    )


def create_logging_status_table(status: dict[str, Any]) -> Table:
    """Create a logging configuration status table.

    Args:
        status: Logging status dictionary
    """
    logging_data = {
        "🔧 Mode": status["mode"].title(),
        "📁 Log Directory": status["log_directory"] or "N/A (production mode)",
        "🔇 Suppressed Libraries": ", ".join(status["third_party_suppressed"]),
    }

    if status["log_files"]["main"]:
        logging_data["📝 Main Log"] = status["log_files"]["main"]
    if status["log_files"]["json"]:
        logging_data["📊 JSON Log"] = status["log_files"]["json"]
    if status["log_files"]["errors"]:
        logging_data["🚨 Error Log"] = status["log_files"]["errors"]

    return create_key_value_table(
        title="🔍 Logging Configuration",
        data=logging_data,
        title_style="bold green",
        key_style="blue",
        value_style="white",
    )


def print_rich_table(console: Console, table: Table) -> None:
    """Print a rich table with spacing before and after."""
    console.print()
    console.print(table)
    console.print()
