# ABOUTME: JSON checkpoint written between crawling and loading
# ABOUTME: Lets a failed load be retried without crawling the wiki again

from pathlib import Path

from mathcomp_ingest.core.models import CompetitionDump
from mathcomp_ingest.utils.logging import get_logger

logger = get_logger(__name__)


def checkpoint_path(output_dir: Path, competition_id: str) -> Path:
    return Path(output_dir) / f"{competition_id}_data.json"


def save_checkpoint(dump: CompetitionDump, path: Path) -> Path:
    """Write the dump as camelCase JSON, replacing any previous file only once fully written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_text(dump.model_dump_json(by_alias=True, exclude_none=True, indent=2), encoding="utf-8")
    tmp_path.replace(path)

    logger.info("Checkpoint saved", path=str(path), exams=len(dump.exams), problems=dump.problem_count)
    return path


def load_checkpoint(path: Path) -> CompetitionDump:
    """Read a checkpoint back into models.

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the file does not have the checkpoint shape
    """
    path = Path(path)
    dump = CompetitionDump.model_validate_json(path.read_text(encoding="utf-8"))
    logger.info("Checkpoint loaded", path=str(path), exams=len(dump.exams), problems=dump.problem_count)
    return dump
