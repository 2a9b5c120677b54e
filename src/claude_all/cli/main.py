"""Main CLI entry point for claude-all."""

import logging
import sys

import click

from claude_all.cli.commands.run import run
from claude_all.constants import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV
from claude_all.utils.env import get_str_env


def configure_logging() -> None:
    level_name = get_str_env(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(args=None) -> None:
    """Run claude-all; every failure, usage errors included, exits with status 1."""
    configure_logging()
    try:
        exit_code = run.main(args=args, prog_name="claude-all", standalone_mode=False)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    sys.exit(exit_code or 0)


if __name__ == "__main__":
    main()
