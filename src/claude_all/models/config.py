"""Run configuration model."""

from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from claude_all.constants import (
    ARCHIVE_DIR_NAME,
    COMPLETION_SIGNAL,
    LAST_BRANCH_FILE_NAME,
    OUTPUT_DIR_NAME,
    PACKAGE_DIR,
    PRD_FILE_NAME,
    PROGRESS_FILE_NAME,
    PROMPT_FILE_NAME,
    SKILL_FILE_NAME,
    TEMPLATES_DIR_NAME,
)

PathLike = Union[str, Path]


class RalphConfig(BaseModel):
    """File locations for one run.

    Run state (prd.json, progress log, archive, branch marker) is always rooted
    at ``working_dir``; the static templates are always rooted at
    ``install_dir``. The two may be the same directory.
    """

    model_config = ConfigDict(frozen=True)

    install_dir: Path
    working_dir: Path
    output_dir: Path
    prd_file: Path
    progress_file: Path
    archive_dir: Path
    last_branch_file: Path
    prompt_file: Path
    skill_file: Path
    completion_signal: str = COMPLETION_SIGNAL


def create_config(
    working_dir: Optional[PathLike] = None, install_dir: Optional[PathLike] = None
) -> RalphConfig:
    """Build a config from a working root and an install root.

    Pure path joining: nothing is checked or created on disk.

    Args:
        working_dir: Directory owning run state (default: current directory)
        install_dir: Directory owning the templates (default: this package)
    """
    working = Path(working_dir) if working_dir is not None else Path.cwd()
    install = Path(install_dir) if install_dir is not None else PACKAGE_DIR
    output_dir = working / OUTPUT_DIR_NAME
    templates_dir = install / TEMPLATES_DIR_NAME

    return RalphConfig(
        install_dir=install,
        working_dir=working,
        output_dir=output_dir,
        prd_file=output_dir / PRD_FILE_NAME,
        progress_file=output_dir / PROGRESS_FILE_NAME,
        archive_dir=output_dir / ARCHIVE_DIR_NAME,
        last_branch_file=output_dir / LAST_BRANCH_FILE_NAME,
        prompt_file=templates_dir / PROMPT_FILE_NAME,
        skill_file=templates_dir / SKILL_FILE_NAME,
    )
