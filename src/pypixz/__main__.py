"""Module entry-point for command-line invocation.

This module is executed when the package is run with `python -m pypixz` or
through the `pypixz` console script. It configures basic logging, runs the
invocation and is the only place that reports errors and picks the exit
status.
"""

import sys
from asyncio import run
from collections.abc import Sequence
from logging import INFO, basicConfig

from .engine import Engine
from .errors import ExitCode, FatalError, UsageError
from .main import parse_args, parser
from .meta import LOGGER

__all__ = (
    "execute",
    "main",
)


def execute(args: Sequence[str], *, engine: Engine | None = None) -> ExitCode:
    """Run one invocation with the command-line arguments `args`.

    Usage errors print their message and the help text to standard error and
    return `ExitCode.USAGE_ERROR`; fatal errors are logged and return
    `ExitCode.FATAL_ERROR`.
    """

    argument_parser = parser()
    try:
        entry = parse_args(args, argument_parser)
        run(entry.invoke(entry, engine=engine))
    except UsageError as exc:
        if exc.message:
            print(f"{exc.message}\n", file=sys.stderr)
        argument_parser.print_help(sys.stderr)
        return exc.exit_code
    except FatalError as exc:
        LOGGER.error(str(exc))
        return exc.exit_code
    except Exception:
        LOGGER.exception("Error")
        return ExitCode.FATAL_ERROR
    return ExitCode.SUCCESS


def main() -> None:
    """Main entry point for the pypixz command-line interface.

    This function is called when the module is executed as a script. It sets up
    logging, runs the invocation and exits with its status.
    """
    basicConfig(level=INFO)
    sys.exit(execute(sys.argv[1:]))


if __name__ == "__main__":
    main()
