"""Agent loop service.

Each iteration hands the same static prompt to a fresh agent process. The
agent picks the next incomplete story from prd.json, implements it and marks
it done; the loop only watches the output for the completion signal.
"""

import logging
import time
from typing import Optional

from claude_all.clients.agent import AgentClient
from claude_all.constants import (
    DEFAULT_MAX_ITERATIONS,
    ITERATION_PAUSE_ENV,
    ITERATION_PAUSE_SECONDS,
)
from claude_all.models.config import RalphConfig
from claude_all.models.loop import LoopResult, LoopState
from claude_all.utils.env import get_float_env

logger = logging.getLogger(__name__)


class LoopObserver:
    """Receives loop progress events. All hooks default to no-ops.

    Hooks observe only; their return values are ignored.
    """

    def on_loop_start(self, max_iterations: int) -> None:
        pass

    def on_iteration(self, iteration: int, max_iterations: int) -> None:
        pass

    def on_agent_output(self, text: str) -> None:
        pass

    def on_pause(self, iteration: int, max_iterations: int) -> None:
        pass

    def on_complete(self, iteration: int, max_iterations: int) -> None:
        pass

    def on_exhausted(self, max_iterations: int) -> None:
        pass


def run_agent_loop(
    config: RalphConfig,
    agent: AgentClient,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    observer: Optional[LoopObserver] = None,
    pause_seconds: Optional[float] = None,
) -> LoopResult:
    """Run the agent until it prints the completion signal or the budget runs out.

    The agent's exit code is not inspected; only its output text decides
    completion.

    Args:
        config: Run configuration
        agent: Agent client invoked once per iteration
        max_iterations: Iteration budget (positive)
        observer: Optional progress observer
        pause_seconds: Delay between iterations (default from CLAUDE_ALL_ITERATION_PAUSE)

    Returns:
        LoopResult in state COMPLETED or EXHAUSTED

    Raises:
        FileNotFoundError: If the prompt template is missing
        AgentError: If an agent process cannot be started
    """
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be positive, got {max_iterations}")
    observer = observer or LoopObserver()
    if pause_seconds is None:
        pause_seconds = get_float_env(ITERATION_PAUSE_ENV, ITERATION_PAUSE_SECONDS)
    pause_seconds = max(0.0, pause_seconds)

    prompt = config.prompt_file.read_text(encoding="utf-8")

    observer.on_loop_start(max_iterations)
    logger.info(f"Starting agent loop (max iterations: {max_iterations})")

    for iteration in range(1, max_iterations + 1):
        observer.on_iteration(iteration, max_iterations)
        logger.info(f"Iteration {iteration}/{max_iterations}")

        result = agent.run(prompt, cwd=config.working_dir, on_output=observer.on_agent_output)

        if config.completion_signal in result.output:
            logger.info(f"Completion signal received at iteration {iteration}")
            observer.on_complete(iteration, max_iterations)
            return LoopResult(
                state=LoopState.COMPLETED, iteration=iteration, max_iterations=max_iterations
            )

        if iteration < max_iterations:
            observer.on_pause(iteration, max_iterations)
            time.sleep(pause_seconds)

    logger.info(f"Agent loop exhausted {max_iterations} iterations")
    observer.on_exhausted(max_iterations)
    return LoopResult(
        state=LoopState.EXHAUSTED, iteration=max_iterations, max_iterations=max_iterations
    )
