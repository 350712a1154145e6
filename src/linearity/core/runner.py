"""Command execution through invoke."""

import shlex
from pathlib import Path

from invoke import Context, Result

from linearity.core.log import logger


def format_command(template: str, **args) -> str:
    """Fill a command template, shell-quoting every argument.

    None becomes an empty string so optional arguments can be left
    out of the command line.

    Example:
        >>> format_command("git checkout {ref}", ref="a b")
        "git checkout 'a b'"
    """
    quoted = {
        key: "" if value is None else shlex.quote(str(value))
        for key, value in args.items()
    }
    return template.format(**quoted)


class Runner(Context):
    """invoke.Context with a single execute() entry point.

    The method name stays clear of invoke's own run()/sudo() so both
    remain usable on the same object.
    """

    def execute(
        self,
        command: str,
        cwd: Path | None = None,
        check: bool = True,
        interactive: bool = False,
        log_level: str | None = None,
    ) -> Result:
        """Run a shell command and return its result.

        Args:
            command: Command line, already quoted
            cwd: Working directory
            check: Raise invoke.UnexpectedExit on non-zero exit
            interactive: Attach a pty and the terminal, for commands
                that open an editor
            log_level: Replay captured output at this level

        Returns:
            invoke.Result with stdout, stderr and exited
        """
        kwargs = {
            "hide": not interactive,
            "warn": not check,
            "in_stream": None if interactive else False,
            "pty": interactive,
        }

        logger.trace("Running command", command=command, cwd=str(cwd))

        if cwd:
            with self.cd(str(cwd)):
                result = self.run(command, **kwargs)
        else:
            result = self.run(command, **kwargs)

        if log_level:
            for line in (result.stdout + result.stderr).splitlines():
                logger.log(log_level, line.rstrip())

        return result
