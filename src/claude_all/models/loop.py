"""Agent loop state models."""

from enum import Enum

from pydantic import BaseModel


class LoopState(str, Enum):
    """Agent loop state enumeration."""

    RUNNING = "running"
    COMPLETED = "completed"
    EXHAUSTED = "exhausted"


class LoopResult(BaseModel):
    """Terminal state of an agent loop run.

    ``iteration`` is the iteration that printed the completion signal, or the
    last iteration run when the budget was exhausted.
    """

    state: LoopState
    iteration: int
    max_iterations: int

    @property
    def completed(self) -> bool:
        return self.state == LoopState.COMPLETED
