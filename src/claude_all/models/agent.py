"""Agent process models."""

from pydantic import BaseModel


class AgentResult(BaseModel):
    """Collected output of one agent process.

    ``output`` holds stdout and stderr interleaved in arrival order.
    """

    output: str
    exit_code: int
