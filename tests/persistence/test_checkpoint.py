# ABOUTME: Tests for crawl checkpoint files
# ABOUTME: Checks file naming, the camelCase JSON shape and errors for missing or malformed files

import json

import pytest
from pydantic import ValidationError

from mathcomp_ingest.core.models import CompetitionDump, Exam, Problem, Solution
from mathcomp_ingest.persistence.checkpoint import checkpoint_path, load_checkpoint, save_checkpoint


@pytest.fixture
def dump() -> CompetitionDump:
    return CompetitionDump(
        competition_id="amc8",
        competition_name="AMC 8",
        exams=[
            Exam(
                year=2023,
                problems=[
                    Problem(
                        problem_number=1,
                        problem_text="What is $1+1$?",
                        correct_answer="B",
                        solutions=[Solution(title="Solution 1", text="Two.")],
                        solution_text="Two.",
                        choices={"A": "$1$", "B": "$2$", "C": "$3$", "D": "$4$", "E": "$5$"},
                    )
                ],
            )
        ],
    )


class TestCheckpoint:
    def test_checkpoint_path(self, tmp_path):
        assert checkpoint_path(tmp_path, "amc8") == tmp_path / "amc8_data.json"

    def test_save_writes_camel_case_json(self, dump, tmp_path):
        path = save_checkpoint(dump, tmp_path / "nested" / "amc8_data.json")

        data = json.loads(path.read_text(encoding="utf-8"))
        problem = data["exams"][0]["problems"][0]
        assert data["competitionId"] == "amc8"
        assert problem["problemNumber"] == 1
        assert problem["correctAnswer"] == "B"
        assert "topic" not in problem
        assert not (tmp_path / "nested" / "amc8_data.json.tmp").exists()

    def test_load_restores_dump(self, dump, tmp_path):
        path = save_checkpoint(dump, tmp_path / "amc8_data.json")

        assert load_checkpoint(path) == dump

    def test_save_replaces_previous_file(self, dump, tmp_path):
        path = tmp_path / "amc8_data.json"
        path.write_text("stale", encoding="utf-8")

        save_checkpoint(dump, path)

        assert load_checkpoint(path).problem_count == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_checkpoint(tmp_path / "absent.json")

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"exams": "nope"}), encoding="utf-8")

        with pytest.raises(ValidationError):
            load_checkpoint(path)
