"""PRD service: status reading and prd.json generation."""

import logging
import time
from typing import Callable, Optional

from claude_all.clients.agent import AgentClient
from claude_all.constants import (
    FALLBACK_SKILL_INSTRUCTIONS,
    PRD_CHECK_DELAY_SECONDS,
    PRD_CHECK_RETRIES,
)
from claude_all.models.config import RalphConfig
from claude_all.models.prd import PrdStatus
from claude_all.utils.prd import PathLike, has_prd_json, load_prd

logger = logging.getLogger(__name__)


def get_prd_status(prd_file: PathLike) -> PrdStatus:
    """Read completion statistics from prd.json.

    Missing and corrupt files, and a file holding only ``null``, all come back
    as an empty status. A story only counts as remaining when ``passes`` is
    exactly ``False``; any other value counts as completed.
    """
    if not has_prd_json(prd_file):
        return PrdStatus()

    try:
        prd = load_prd(prd_file)
    except (OSError, ValueError) as e:
        logger.debug(f"prd.json became unreadable: {e}")
        return PrdStatus()

    if prd is None:
        return PrdStatus()
    if not isinstance(prd, dict):
        prd = {}
    stories = prd.get("userStories") or []
    if not isinstance(stories, list):
        stories = []

    remaining = sum(
        1 for story in stories if isinstance(story, dict) and story.get("passes") is False
    )
    project_name = next(
        (
            name
            for name in (prd.get("project"), prd.get("branchName"))
            if isinstance(name, str) and name
        ),
        "Unknown",
    )
    return PrdStatus(
        exists=True,
        incomplete=remaining > 0,
        total=len(stories),
        remaining=remaining,
        completed=len(stories) - remaining,
        project_name=project_name,
    )


def get_skill_instructions(config: RalphConfig) -> str:
    """Return the PRD conversion instructions from the install root."""
    if config.skill_file.is_file():
        return config.skill_file.read_text(encoding="utf-8")
    logger.info(f"No skill file at {config.skill_file}, using built-in instructions")
    return FALLBACK_SKILL_INSTRUCTIONS


def build_conversion_prompt(prd_text: str, skill_instructions: str) -> str:
    return f"{skill_instructions}\n\n---\n\n## PRD to Convert\n\n{prd_text}"


def wait_for_prd_json(
    prd_file: PathLike,
    retries: int = PRD_CHECK_RETRIES,
    delay: float = PRD_CHECK_DELAY_SECONDS,
) -> bool:
    """Poll until prd.json exists and parses, up to ``retries`` attempts."""
    for attempt in range(1, retries + 1):
        if has_prd_json(prd_file):
            return True
        if attempt < retries:
            logger.debug(f"prd.json not ready (attempt {attempt}/{retries}), retrying")
            time.sleep(delay)
    return False


def generate_prd_json(
    prd_text: str,
    config: RalphConfig,
    agent: AgentClient,
    on_output: Optional[Callable[[str], None]] = None,
) -> bool:
    """Ask the agent to convert a project description into prd.json.

    Args:
        prd_text: Free-form project description
        config: Run configuration
        agent: Agent client used for the conversion
        on_output: Forwarded to the agent client

    Returns:
        True if a parseable prd.json exists afterwards

    Raises:
        AgentError: If the agent cannot be started
    """
    prompt = build_conversion_prompt(prd_text, get_skill_instructions(config))
    agent.run(prompt, cwd=config.working_dir, on_output=on_output)

    created = wait_for_prd_json(config.prd_file)
    if created:
        logger.info(f"Generated prd.json: {config.prd_file}")
    else:
        logger.warning(f"prd.json was not created at {config.prd_file}")
    return created
