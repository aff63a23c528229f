# ABOUTME: Main CLI application entry point using asyncclick for native async support
# ABOUTME: Provides commands to crawl competitions, load checkpoints into the store, verify and audit

import json
from pathlib import Path

import asyncclick as click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from mathcomp_ingest.config import get_config
from mathcomp_ingest.core.competitions import COMPETITIONS
from mathcomp_ingest.core.service import IngestionService
from mathcomp_ingest.extraction.base import FetchError
from mathcomp_ingest.persistence import WriteError, problem_path
from mathcomp_ingest.utils.logging import (
    LoggingMode,
    configure_logging,
    create_crawl_progress,
    get_logging_status,
    with_pipeline_context,
)
from mathcomp_ingest.utils.rich_tables import (
    create_competitions_table,
    create_conflicts_table,
    create_crawl_report_table,
    create_logging_status_table,
    create_problem_table,
    create_write_summary_table,
    print_rich_table,
)

console = Console()


def _echo_json(payload) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@click.command()
@click.argument("competition")
@click.option("--from-year", type=int, help="First exam year to crawl (inclusive)")
@click.option("--to-year", type=int, help="Last exam year to crawl (inclusive)")
@click.option("--classify", is_flag=True, help="Label problems with topics after crawling")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Checkpoint file to write")
@click.option("--deadline", type=float, help="Abort the crawl after this many seconds")
@click.pass_context
async def crawl(
    ctx,
    competition: str,
    from_year: int | None,
    to_year: int | None,
    classify: bool,
    output: Path | None,
    deadline: float | None,
):
    """
    🕷️ Crawl a competition's wiki pages into a checkpoint file.
    """
    json_output = ctx.obj["json_output"]
    if from_year is not None and to_year is not None and from_year > to_year:
        raise click.BadParameter("--from-year must not be after --to-year")

    with with_pipeline_context("crawl", competition_id=competition) as logger:
        service = IngestionService()
        try:
            if json_output:
                outcome = await service.crawl(competition, from_year, to_year, classify, output, deadline)
            else:
                console.print(
                    Panel.fit(f"🕷️ [bold cyan]Crawling {competition}[/bold cyan]", border_style="magenta")
                )
                progress, _task_id, tracker = create_crawl_progress(console)
                with progress:
                    outcome = await service.crawl(
                        competition, from_year, to_year, classify, output, deadline, progress=tracker
                    )
        except KeyError as e:
            raise click.BadParameter(e.args[0], param_hint="COMPETITION") from e
        except FetchError as e:
            raise click.ClickException(f"Could not load the competition index: {e}") from e
        except TimeoutError as e:
            raise click.ClickException(f"Crawl exceeded the {deadline}s deadline") from e

        logger.info("Crawl complete", checkpoint=str(outcome.checkpoint), problems=outcome.report.problems_crawled)

        if json_output:
            _echo_json({"checkpoint": str(outcome.checkpoint), "report": outcome.report.model_dump(mode="json")})
            return

        print_rich_table(console, create_crawl_report_table(outcome.report))
        if outcome.report.conflicts:
            print_rich_table(console, create_conflicts_table(outcome.report.conflicts))
        console.print(f"💾 Checkpoint: [bold green]{outcome.checkpoint}[/bold green]")


@click.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.pass_context
async def load(ctx, path: Path):
    """
    📦 Load a checkpoint file into the document store.
    """
    service = IngestionService()
    try:
        dump, summary = await service.load(path)
    except FileNotFoundError as e:
        raise click.ClickException(f"Checkpoint not found: {path}") from e
    except ValidationError as e:
        raise click.ClickException(f"Checkpoint {path} is malformed: {e.error_count()} errors") from e
    except WriteError as e:
        raise click.ClickException(f"Load failed: {e}") from e

    if ctx.obj["json_output"]:
        _echo_json(
            {
                "competitionId": dump.competition_id,
                "headerWrites": summary.header_writes,
                "documentsWritten": summary.documents_written,
                "transactions": summary.transactions,
                "batchSizes": summary.batch_sizes,
            }
        )
        return

    print_rich_table(console, create_write_summary_table(summary, dump.competition_id))


@click.command()
@click.argument("competition")
@click.argument("year", type=int)
@click.argument("problem", type=int)
@click.pass_context
async def verify(ctx, competition: str, year: int, problem: int):
    """
    🔍 Read one problem back from the document store.
    """
    try:
        path = problem_path(competition, year, problem)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="COMPETITION") from e

    service = IngestionService()
    document = await service.verify(competition, year, problem)
    if document is None:
        raise click.ClickException(f"No document at {path}")

    if ctx.obj["json_output"]:
        _echo_json(document)
        return

    print_rich_table(console, create_problem_table(document, path))


@click.command()
@click.argument("competition")
@click.pass_context
async def audit(ctx, competition: str):
    """
    📊 Completion audit of a competition as stored.
    """
    service = IngestionService()
    try:
        report = await service.audit(competition)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="COMPETITION") from e

    if ctx.obj["json_output"]:
        _echo_json({**report.model_dump(mode="json"), "completionRate": report.completion_rate})
        return

    print_rich_table(console, create_crawl_report_table(report, title="📊 Completion Audit"))


@click.command(name="competitions")
@click.pass_context
def list_competitions(ctx):
    """
    🏆 List the competitions that can be crawled.
    """
    if ctx.obj["json_output"]:
        _echo_json(
            [{"id": c.id, "name": c.name, "problemCount": c.problem_count} for c in COMPETITIONS.values()]
        )
        return

    print_rich_table(console, create_competitions_table(list(COMPETITIONS.values())))


def _initialize_logging(json_output: bool, log_level: str | None = None, log_file: str | None = None) -> None:
    """Initialize logging configuration."""
    try:
        config = get_config()
        mode = LoggingMode.PRODUCTION if json_output else LoggingMode.INTERACTIVE

        # Use config defaults when CLI parameters are not provided
        final_log_level = log_level or config.log_level
        final_log_file = log_file or (str(config.log_file) if config.log_file else None)

        configure_logging(mode=mode, log_level=final_log_level, log_file=final_log_file)
    except (FileNotFoundError, PermissionError, OSError):
        # Log directory unusable: fall back to stdout JSON
        configure_logging(mode=LoggingMode.PRODUCTION, log_level=log_level or "INFO")


@click.command(name="logging-status")
def logging_status():
    """
    📊 Show current logging configuration and status.
    """
    status = get_logging_status()
    logging_table = create_logging_status_table(status)
    print_rich_table(console, logging_table)


@click.group(invoke_without_command=True)
@click.option("--json", "json_output", is_flag=True, help="Output JSON instead of rich tables")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--log-file", help="Custom log file path")
@click.pass_context
def app(ctx, json_output: bool, log_level: str | None, log_file: str | None):
    """
    🧮 mathcomp-ingest - math competition wiki crawler and loader

    Crawl problems, solutions and answers from competition wiki pages into a
    checkpoint file, then load them into a hierarchical document store.
    """
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json_output

    _initialize_logging(json_output, log_level, log_file)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


app.add_command(crawl)
app.add_command(load)
app.add_command(verify)
app.add_command(audit)
app.add_command(list_competitions)
app.add_command(logging_status)


if __name__ == "__main__":
    app()
