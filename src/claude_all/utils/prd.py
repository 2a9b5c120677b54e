"""prd.json and progress log file helpers."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Union

from claude_all.constants import PROGRESS_LOG_TITLE

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """Format as ISO-8601 UTC with milliseconds, e.g. 2024-01-15T09:30:00.000Z."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def progress_header() -> str:
    """Return a fresh progress log header stamped with the current time."""
    return f"{PROGRESS_LOG_TITLE}\nStarted: {iso_timestamp(utc_now())}\n---\n"


def load_prd(prd_file: PathLike) -> Any:
    """Read and decode prd.json.

    Raises:
        OSError: If the file cannot be read
        ValueError: If the content is not valid JSON or nests too deeply to decode
    """
    text = Path(prd_file).read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except RecursionError as e:
        raise ValueError(f"prd.json is nested too deeply to decode: {prd_file}") from e


def has_prd_json(prd_file: PathLike) -> bool:
    """Check that prd.json exists and holds valid JSON."""
    path = Path(prd_file)
    if not path.is_file():
        return False
    try:
        load_prd(path)
        return True
    except (OSError, ValueError) as e:
        logger.debug(f"Unreadable prd.json at {path}: {e}")
        return False


def read_prd_file(file_path: PathLike) -> str:
    """Read a free-form project description.

    Raises:
        FileNotFoundError: If the file does not exist
    """
    resolved = Path(file_path).resolve()
    if not resolved.is_file():
        raise FileNotFoundError(f"File not found: {resolved}")
    return resolved.read_text(encoding="utf-8")


def ensure_output_dir(output_dir: PathLike) -> None:
    Path(output_dir).mkdir(parents=True, exist_ok=True)


def init_progress_file(progress_file: PathLike) -> bool:
    """Create the progress log with its header unless it already exists.

    Returns:
        True if the file was created
    """
    path = Path(progress_file)
    if path.exists():
        return False
    path.write_text(progress_header(), encoding="utf-8")
    logger.info(f"Created progress log: {path}")
    return True
