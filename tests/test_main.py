# ABOUTME: Tests for the CLI application
# ABOUTME: Exercises commands through asyncclick's CliRunner against a temporary SQLite store

import json

import pytest
from asyncclick.testing import CliRunner
from loguru import logger as loguru_logger

from mathcomp_ingest import config as config_module
from mathcomp_ingest.core.models import CompetitionDump, Exam, Problem
from mathcomp_ingest.main import app
from mathcomp_ingest.persistence.checkpoint import save_checkpoint


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Run each command in a temp directory with its own database."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MATHCOMP_INGEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/db/store.db")
    monkeypatch.setenv("MATHCOMP_INGEST_OUTPUT_DIR", str(tmp_path / "data"))
    config_module.reload_config()
    yield
    config_module._config_instance = None
    loguru_logger.remove()


@pytest.fixture
def checkpoint(tmp_path):
    dump = CompetitionDump(
        competition_id="amc8",
        competition_name="AMC 8",
        exams=[
            Exam(
                year=2023,
                problems=[
                    Problem(problem_number=1, problem_text="What is $1+1$?", correct_answer="B"),
                    Problem(problem_number=2, problem_text="Find $x$."),
                ],
            )
        ],
    )
    return save_checkpoint(dump, tmp_path / "data" / "amc8_data.json")


@pytest.mark.asyncio
async def test_help():
    runner = CliRunner()
    result = await runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "mathcomp-ingest" in result.output
    for command in ("crawl", "load", "verify", "audit", "competitions"):
        assert command in result.output


@pytest.mark.asyncio
async def test_no_command_shows_help():
    runner = CliRunner()
    result = await runner.invoke(app, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


@pytest.mark.asyncio
async def test_competitions_table():
    runner = CliRunner()
    result = await runner.invoke(app, ["competitions"])
    assert result.exit_code == 0
    assert "Competitions" in result.output
    assert "amc8" in result.output


@pytest.mark.asyncio
async def test_competitions_json():
    runner = CliRunner()
    result = await runner.invoke(app, ["--json", "competitions"])
    assert result.exit_code == 0
    competitions = json.loads(result.output)
    assert {"id": "aime2", "name": "AIME II", "problemCount": 15} in competitions


@pytest.mark.asyncio
async def test_logging_status():
    runner = CliRunner()
    result = await runner.invoke(app, ["logging-status"])
    assert result.exit_code == 0
    assert "Logging Configuration" in result.output


@pytest.mark.asyncio
async def test_load_then_verify(checkpoint):
    runner = CliRunner()

    result = await runner.invoke(app, ["--log-level", "ERROR", "load", str(checkpoint)])
    assert result.exit_code == 0, result.output
    assert "Load Summary" in result.output

    result = await runner.invoke(app, ["--json", "--log-level", "ERROR", "verify", "amc8", "2023", "1"])
    assert result.exit_code == 0, result.output
    document = json.loads(result.output)
    assert document["correctAnswer"] == "B"
    assert document["problemText"] == "What is $1+1$?"


@pytest.mark.asyncio
async def test_load_json_summary(checkpoint):
    runner = CliRunner()
    result = await runner.invoke(app, ["--json", "--log-level", "ERROR", "load", str(checkpoint)])
    assert result.exit_code == 0, result.output
    summary = json.loads(result.output)
    assert summary["competitionId"] == "amc8"
    assert summary["documentsWritten"] == 2
    assert summary["transactions"] == 1


@pytest.mark.asyncio
async def test_audit_after_load(checkpoint):
    runner = CliRunner()
    await runner.invoke(app, ["--log-level", "ERROR", "load", str(checkpoint)])

    result = await runner.invoke(app, ["--json", "--log-level", "ERROR", "audit", "amc8"])
    assert result.exit_code == 0, result.output
    report = json.loads(result.output)
    assert report["problems_crawled"] == 2
    assert report["completionRate"] == 0.5


@pytest.mark.asyncio
async def test_verify_missing_document():
    runner = CliRunner()
    result = await runner.invoke(app, ["--log-level", "ERROR", "verify", "amc8", "2023", "9"])
    assert result.exit_code != 0
    assert "No document at competitions/amc8/exams/2023/problems/9" in result.output


@pytest.mark.asyncio
async def test_verify_invalid_competition_id():
    runner = CliRunner()
    result = await runner.invoke(app, ["--log-level", "ERROR", "verify", "amc 8", "2023", "1"])
    assert result.exit_code == 2
    assert "Invalid document id" in result.output


@pytest.mark.asyncio
async def test_audit_invalid_competition_id():
    runner = CliRunner()
    result = await runner.invoke(app, ["--log-level", "ERROR", "audit", "amc/8"])
    assert result.exit_code == 2
    assert "Invalid document id" in result.output


@pytest.mark.asyncio
async def test_load_missing_checkpoint(tmp_path):
    runner = CliRunner()
    result = await runner.invoke(app, ["load", str(tmp_path / "absent.json")])
    assert result.exit_code != 0
    assert "Checkpoint not found" in result.output


@pytest.mark.asyncio
async def test_crawl_unknown_competition():
    runner = CliRunner()
    result = await runner.invoke(app, ["crawl", "putnam"])
    assert result.exit_code == 2
    assert "Unknown competition" in result.output


@pytest.mark.asyncio
async def test_crawl_rejects_inverted_year_range():
    runner = CliRunner()
    result = await runner.invoke(app, ["crawl", "amc8", "--from-year", "2024", "--to-year", "2020"])
    assert result.exit_code == 2
    assert "--from-year" in result.output
