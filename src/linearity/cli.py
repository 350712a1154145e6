#!/usr/bin/env python3
"""linearity CLI - update and merge pull requests with linear history."""

import asyncio
import sys

from pydantic_settings import CliApp, CliSubCommand, get_subcommand

from linearity.command.merge import MergeCommand
from linearity.command.update import UpdateCommand
from linearity.core.config import State
from linearity.core.log import setup_logger


class CliState(State):
    """Update and merge pull request branches without foxtrot merges.

    `update` brings a pull request branch up to date with its base so
    that `merge` can fast-forward the base onto it.

    Configuration sources (in priority order):
    1. Command-line arguments (--config.merge.squash true)
    2. Environment variables and .env
       (LINEARITY_CONFIG__MERGE__TITLE_PREFIX=...)
    3. git config linearity.* keys (local over global)
    4. ./linearity.yaml, then the user linearity.yaml, then defaults
    """

    update: CliSubCommand[UpdateCommand]
    merge: CliSubCommand[MergeCommand]

    def cli_cmd(self):
        """Dispatch to the active subcommand, or show help."""
        subcommand = get_subcommand(self, is_required=False)

        if subcommand is None:
            CliApp.run(CliState, cli_args=['--help'])
            sys.exit(1)

        logging = self.config.logger
        setup_logger(
            log_root=self.config.log_root,
            run_name=subcommand.command_name,
            level=logging.level,
            console=logging.console,
            file=logging.file,
        )

        # Closing the config closes the logger and its file sink
        with self.config:
            exit_code = asyncio.run(subcommand.run_workflow(self))
        raise SystemExit(exit_code)


def main():
    """Main entry point for CLI."""
    CliApp.run(CliState)


if __name__ == "__main__":
    main()
