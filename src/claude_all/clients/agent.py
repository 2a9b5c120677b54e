"""Client for the external coding agent process."""

import logging
import queue
import shlex
import subprocess
import threading
from pathlib import Path
from typing import IO, Callable, List, Optional, Sequence, Union

import click

from claude_all.constants import AGENT_COMMAND_ENV, DEFAULT_AGENT_COMMAND
from claude_all.models.agent import AgentResult
from claude_all.utils.env import get_str_env

logger = logging.getLogger(__name__)

STDOUT = "stdout"
STDERR = "stderr"


class AgentError(Exception):
    """Exception raised when the agent process cannot be started."""

    pass


def _pump(stream: IO[str], channel: str, chunks: "queue.Queue") -> None:
    """Forward lines from one pipe into the shared queue, then a None sentinel."""
    try:
        for line in iter(stream.readline, ""):
            chunks.put((channel, line))
    finally:
        stream.close()
        chunks.put((channel, None))


class AgentClient:
    """Runs one agent process per prompt.

    The prompt is written to stdin in one go and stdin is closed. stdout and
    stderr are read concurrently and merged into a single buffer in arrival
    order; each channel stays internally ordered.
    """

    def __init__(
        self,
        command: Optional[Union[str, Sequence[str]]] = None,
        stream_output: bool = True,
    ):
        if command is None:
            command = get_str_env(AGENT_COMMAND_ENV, DEFAULT_AGENT_COMMAND)
        self.command: List[str] = (
            shlex.split(command) if isinstance(command, str) else list(command)
        )
        self.stream_output = stream_output

    @staticmethod
    def _send_prompt(process: subprocess.Popen, prompt: str) -> None:
        """Write the whole prompt and close stdin; the agent may exit without reading it."""
        try:
            process.stdin.write(prompt)
        except BrokenPipeError:
            logger.warning(f"Agent process {process.pid} closed stdin before the prompt was sent")
        try:
            process.stdin.close()
        except BrokenPipeError:
            logger.debug(f"Agent process {process.pid} stdin already closed")

    def run(
        self,
        prompt: str,
        cwd: Optional[Union[str, Path]] = None,
        on_output: Optional[Callable[[str], None]] = None,
    ) -> AgentResult:
        """Send a prompt to a fresh agent process and wait for it to exit.

        Args:
            prompt: Full prompt text
            cwd: Working directory for the agent
            on_output: Called with every chunk of output as it arrives

        Returns:
            AgentResult with the merged output and the exit code

        Raises:
            AgentError: If the process cannot be spawned
        """
        try:
            process = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=str(cwd) if cwd is not None else None,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise AgentError(f"Failed to start agent '{shlex.join(self.command)}': {e}") from e

        logger.info(f"Started agent process {process.pid}: {shlex.join(self.command)}")

        chunks: "queue.Queue" = queue.Queue()
        readers = [
            threading.Thread(target=_pump, args=(process.stdout, STDOUT, chunks), daemon=True),
            threading.Thread(target=_pump, args=(process.stderr, STDERR, chunks), daemon=True),
        ]
        for reader in readers:
            reader.start()

        self._send_prompt(process, prompt)

        output: List[str] = []
        open_channels = len(readers)
        while open_channels:
            channel, text = chunks.get()
            if text is None:
                open_channels -= 1
                continue
            output.append(text)
            if on_output:
                on_output(text)
            if self.stream_output:
                click.echo(text, nl=False, err=channel == STDERR)

        for reader in readers:
            reader.join()
        exit_code = process.wait()

        logger.info(f"Agent process {process.pid} exited with code {exit_code}")
        return AgentResult(output="".join(output), exit_code=exit_code)
