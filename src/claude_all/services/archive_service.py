"""Archive service: snapshots a superseded run when the PRD branch changes."""

import logging
import shutil
from pathlib import Path
from typing import Optional

from claude_all.constants import BRANCH_PREFIX
from claude_all.models.config import RalphConfig
from claude_all.utils.prd import load_prd, progress_header, utc_now

logger = logging.getLogger(__name__)


def _branch_name(prd: object) -> str:
    value = prd.get("branchName") if isinstance(prd, dict) else None
    return value if isinstance(value, str) else ""


def archive_folder_name(last_branch: str) -> str:
    """Return ``<UTC date>-<branch without prefix>``."""
    if last_branch.startswith(BRANCH_PREFIX):
        last_branch = last_branch[len(BRANCH_PREFIX) :]
    return f"{utc_now().strftime('%Y-%m-%d')}-{last_branch}"


def archive_previous_run(config: RalphConfig) -> Optional[Path]:
    """Archive prd.json and the progress log if the branch changed since last run.

    Does nothing unless both prd.json and the branch marker exist and hold
    different non-empty branch names, and the folder derived from the old branch
    stays inside the archive directory. The files are copied as they are at the
    moment of detection, then the progress log is reset to a fresh header.
    Every failure is swallowed: archiving never blocks the loop.

    Returns:
        The archive folder, or None if nothing was archived
    """
    if not config.prd_file.is_file() or not config.last_branch_file.is_file():
        return None

    try:
        current_branch = _branch_name(load_prd(config.prd_file))
        last_branch = config.last_branch_file.read_text(encoding="utf-8").strip()

        if not current_branch or not last_branch or current_branch == last_branch:
            return None

        archive_folder = config.archive_dir / archive_folder_name(last_branch)
        if config.archive_dir.resolve() not in archive_folder.resolve().parents:
            logger.warning(f"Not archiving: branch '{last_branch}' escapes {config.archive_dir}")
            return None
        archive_folder.mkdir(parents=True, exist_ok=True)

        shutil.copyfile(config.prd_file, archive_folder / config.prd_file.name)
        if config.progress_file.is_file():
            shutil.copyfile(config.progress_file, archive_folder / config.progress_file.name)

        config.progress_file.write_text(progress_header(), encoding="utf-8")
        logger.info(f"Archived previous run '{last_branch}' to {archive_folder}")
        return archive_folder

    except (OSError, ValueError) as e:
        logger.debug(f"Skipped archiving previous run: {e}")
        return None


def track_current_branch(config: RalphConfig) -> None:
    """Record the PRD's branchName in the branch marker file."""
    if not config.prd_file.is_file():
        return

    try:
        branch_name = _branch_name(load_prd(config.prd_file))
        if branch_name:
            config.last_branch_file.write_text(branch_name, encoding="utf-8")
            logger.info(f"Tracking branch: {branch_name}")
    except (OSError, ValueError) as e:
        logger.debug(f"Skipped branch tracking: {e}")
