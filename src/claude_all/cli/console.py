"""Console presentation for the agent loop."""

from typing import Optional

import click

from claude_all.models.config import RalphConfig
from claude_all.services.loop_service import LoopObserver
from claude_all.utils.spinner import Spinner

RULE_WIDTH = 55


def echo_header(message: str) -> None:
    click.echo("")
    click.secho("═" * RULE_WIDTH, fg="cyan")
    click.secho(f"  {message}", fg="cyan")
    click.secho("═" * RULE_WIDTH, fg="cyan")


class ConsoleObserver(LoopObserver):
    """Prints iteration headers and keeps a spinner up until the agent speaks."""

    def __init__(self, config: RalphConfig):
        self.config = config
        self._spinner: Optional[Spinner] = None

    def _start_spinner(self, spinner: Spinner) -> None:
        self.close()
        self._spinner = spinner.start()

    def close(self) -> None:
        """Stop any running spinner."""
        if self._spinner is not None:
            was_animating = self._spinner.running
            self._spinner.stop()
            self._spinner = None
            if was_animating:
                click.echo("")

    def on_loop_start(self, max_iterations: int) -> None:
        click.secho(f"\nStarting Ralph - Max iterations: {max_iterations}", bold=True)

    def on_iteration(self, iteration: int, max_iterations: int) -> None:
        self.close()
        echo_header(f"Ralph Iteration {iteration} of {max_iterations}")
        self._start_spinner(
            Spinner(
                f"Iteration {iteration}/{max_iterations}: "
                "Reading prd.json and selecting next user story...",
                color="cyan",
            )
        )

    def on_agent_output(self, text: str) -> None:
        self.close()

    def on_pause(self, iteration: int, max_iterations: int) -> None:
        self._start_spinner(
            Spinner(
                f"Iteration {iteration} complete. Preparing iteration {iteration + 1}...",
                color=None,
                dim=True,
            )
        )

    def on_complete(self, iteration: int, max_iterations: int) -> None:
        self.close()
        click.echo("")
        click.secho("Ralph completed all tasks!", fg="green", bold=True)
        click.secho(f"Completed at iteration {iteration} of {max_iterations}", fg="green")

    def on_exhausted(self, max_iterations: int) -> None:
        self.close()
        click.echo("")
        click.secho(
            f"Ralph reached max iterations ({max_iterations}) without completing all tasks.",
            fg="yellow",
        )
        click.secho(f"Check {self.config.progress_file} for status.", fg="yellow")
