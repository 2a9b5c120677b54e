"""Run command for the claude-all CLI."""

import sys
from typing import Optional, Sequence

import click
from pydantic import BaseModel

from claude_all.cli.console import ConsoleObserver
from claude_all.clients.agent import AgentClient, AgentError
from claude_all.constants import DEFAULT_MAX_ITERATIONS
from claude_all.models.config import RalphConfig, create_config
from claude_all.services.archive_service import archive_previous_run, track_current_branch
from claude_all.services.loop_service import run_agent_loop
from claude_all.services.prd_service import generate_prd_json, get_prd_status
from claude_all.utils.prd import (
    ensure_output_dir,
    has_prd_json,
    init_progress_file,
    load_prd,
    read_prd_file,
)
from claude_all.utils.spinner import Spinner
from claude_all.utils.validation import validate_prd_json

# Unknown flags are dropped instead of rejected, and options may appear anywhere
CONTEXT_SETTINGS = {
    "ignore_unknown_options": True,
    "allow_extra_args": True,
    "help_option_names": ["-h", "--help"],
}


class ParsedArgs(BaseModel):
    input_file: Optional[str] = None
    max_iterations: int = DEFAULT_MAX_ITERATIONS


def _input_file_from(tokens: Sequence[str]) -> Optional[str]:
    """Last token that is not a flag; unknown flags never consume the next token."""
    input_file = None
    for token in tokens:
        if token.startswith("-") and token != "-":
            continue
        input_file = token
    return input_file


def prompt_for_input() -> str:
    """Read a multi-line description from stdin until EOF or a line reading END."""
    click.secho(
        '\nEnter your project description (press Ctrl+D or type "END" on a new line when done):',
        fg="yellow",
    )
    lines = []
    for line in sys.stdin:
        if line.strip().upper() == "END":
            break
        lines.append(line.rstrip("\n"))
    return "\n".join(lines).strip()


def _acquire_prd_text(input_file: Optional[str]) -> str:
    if input_file:
        click.secho(f"\nReading PRD from: {input_file}", fg="blue")
        return read_prd_file(input_file)

    prd_text = prompt_for_input()
    if not prd_text:
        raise click.ClickException("No input provided. Exiting.")
    return prd_text


def _generate(prd_text: str, config: RalphConfig, agent: AgentClient) -> bool:
    click.echo("")
    spinner = Spinner("Converting PRD to prd.json format...", color="yellow")

    def stop_spinner(_text: str) -> None:
        if spinner.running:
            spinner.stop()
            click.echo("")

    spinner.start()
    try:
        created = generate_prd_json(prd_text, config, agent, on_output=stop_spinner)
    finally:
        spinner.stop()

    if created:
        click.secho("\nprd.json generated successfully!", fg="green")
    else:
        click.secho("\nWarning: prd.json may not have been created.", fg="yellow")
    return created


def _report_validation(config: RalphConfig) -> None:
    """Warn about structural problems in prd.json; the loop still runs."""
    result = validate_prd_json(load_prd(config.prd_file))
    if result.valid:
        return
    click.secho(f"\nWarning: {config.prd_file} has {len(result.errors)} problem(s):", fg="yellow")
    for error in result.errors:
        click.secho(f"  - {error}", fg="yellow")


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("inputs", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--max-iterations",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_ITERATIONS,
    show_default=True,
    help="Maximum number of agent iterations",
)
@click.pass_context
def run(ctx, inputs, max_iterations):
    """Build a project from a PRD with a long-running agent loop.

    Reads the project description from PRD_FILE, or interactively when no file
    is given, and has the agent turn it into output/prd.json. An existing
    output/prd.json is resumed instead.
    """
    input_file = _input_file_from(inputs)
    config = create_config()
    agent = AgentClient()

    click.secho("Claude-All Agent System", fg="cyan", bold=True)
    click.secho("═" * 55, fg="cyan")

    try:
        if not has_prd_json(config.prd_file):
            prd_text = _acquire_prd_text(input_file)
            ensure_output_dir(config.output_dir)
            if not _generate(prd_text, config, agent):
                raise click.ClickException("Failed to generate prd.json. Please try again.")
        else:
            status = get_prd_status(config.prd_file)
            click.secho("\nExisting prd.json found. Resuming agent loop...", fg="blue")
            click.secho(
                f"  {status.project_name}: {status.completed}/{status.total} stories complete",
                fg="blue",
            )
        _report_validation(config)

        archive_folder = archive_previous_run(config)
        if archive_folder is not None:
            click.secho(f"Archived previous run to: {archive_folder}", dim=True)
        track_current_branch(config)
        init_progress_file(config.progress_file)

        observer = ConsoleObserver(config)
        try:
            result = run_agent_loop(config, agent, max_iterations=max_iterations, observer=observer)
        finally:
            observer.close()

    except (AgentError, OSError, ValueError) as e:
        raise click.ClickException(str(e))

    click.echo("")
    if result.completed:
        click.secho("All tasks completed successfully!", fg="green", bold=True)
    else:
        click.secho(
            f"Agent loop finished. Review {config.progress_file.name} for details.", fg="yellow"
        )
        ctx.exit(1)


def parse_args(args: Sequence[str] = ()) -> ParsedArgs:
    """Parse command line arguments the way the run command does.

    Raises:
        click.UsageError: If --max-iterations is missing its value or is not a
            positive integer
    """
    ctx = run.make_context("claude-all", list(args))
    return ParsedArgs(
        input_file=_input_file_from(ctx.params["inputs"]),
        max_iterations=ctx.params["max_iterations"],
    )
