"""claude-all: long-running coding agent loop driven by a prd.json task list.

Usage:
    from claude_all import AgentClient, create_config, generate_prd_json, run_agent_loop

    config = create_config()
    agent = AgentClient()

    generate_prd_json("Build a todo app with add, delete, complete", config, agent)
    result = run_agent_loop(config, agent, max_iterations=10)
    print(result.completed)
"""

from claude_all.clients.agent import AgentClient, AgentError
from claude_all.constants import COMPLETION_SIGNAL
from claude_all.models.config import RalphConfig, create_config
from claude_all.models.loop import LoopResult, LoopState
from claude_all.models.prd import PrdStatus, ValidationResult
from claude_all.services.archive_service import archive_previous_run, track_current_branch
from claude_all.services.loop_service import LoopObserver, run_agent_loop
from claude_all.services.prd_service import generate_prd_json, get_prd_status
from claude_all.utils.prd import (
    ensure_output_dir,
    has_prd_json,
    init_progress_file,
    read_prd_file,
)
from claude_all.utils.validation import validate_prd_json

__version__ = "0.1.0"

__all__ = [
    "AgentClient",
    "AgentError",
    "COMPLETION_SIGNAL",
    "LoopObserver",
    "LoopResult",
    "LoopState",
    "PrdStatus",
    "RalphConfig",
    "ValidationResult",
    "archive_previous_run",
    "create_config",
    "ensure_output_dir",
    "generate_prd_json",
    "get_prd_status",
    "has_prd_json",
    "init_progress_file",
    "read_prd_file",
    "run_agent_loop",
    "track_current_branch",
    "validate_prd_json",
    "__version__",
]
