"""Constants for the claude-all agent loop.

This module defines the file layout, loop tunables and agent settings used
throughout the application.

claude-all drives an external coding agent (Claude Code by default) through a
prd.json task list: one fresh agent process per iteration, each picking the
next incomplete user story, until the agent prints the completion signal.
"""

from pathlib import Path

# =============================================================================
# Install Root
# =============================================================================
# Directory holding the package itself; static templates are resolved from here
PACKAGE_DIR = Path(__file__).resolve().parent

TEMPLATES_DIR_NAME = "templates"
PROMPT_FILE_NAME = "prompt.md"
SKILL_FILE_NAME = "SKILL.md"

# =============================================================================
# Working Root Layout
# =============================================================================
# All mutable run state lives under <working dir>/output
OUTPUT_DIR_NAME = "output"
PRD_FILE_NAME = "prd.json"
PROGRESS_FILE_NAME = "progress.txt"
ARCHIVE_DIR_NAME = "archive"
LAST_BRANCH_FILE_NAME = ".last-branch"

# =============================================================================
# PRD Format
# =============================================================================
# Every branchName lives in this namespace; archive folders drop the prefix
BRANCH_PREFIX = "ralph/"

STORY_ID_PREFIX = "US-"
STORY_ID_DIGITS = 3

PROGRESS_LOG_TITLE = "# Ralph Progress Log"

# =============================================================================
# Agent Loop Configuration
# =============================================================================
# Literal the agent prints once every story passes
COMPLETION_SIGNAL = "<promise>COMPLETE</promise>"

DEFAULT_MAX_ITERATIONS = 10

# Pause between iterations (seconds), overridable via CLAUDE_ALL_ITERATION_PAUSE
ITERATION_PAUSE_SECONDS = 2.0

# prd.json may land on disk slightly after the agent exits
PRD_CHECK_RETRIES = 3
PRD_CHECK_DELAY_SECONDS = 0.5

# =============================================================================
# Agent Process Configuration
# =============================================================================
# Overridable via CLAUDE_ALL_AGENT_COMMAND
DEFAULT_AGENT_COMMAND = "claude --dangerously-skip-permissions"

AGENT_COMMAND_ENV = "CLAUDE_ALL_AGENT_COMMAND"
ITERATION_PAUSE_ENV = "CLAUDE_ALL_ITERATION_PAUSE"
LOG_LEVEL_ENV = "CLAUDE_ALL_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"

# Used when the install root carries no SKILL.md
FALLBACK_SKILL_INSTRUCTIONS = (
    "Convert the PRD to prd.json format. Save to output/prd.json in the current directory."
)
