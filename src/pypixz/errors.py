"""Exit codes and the error types raised by the command-line pipeline.

Inner components raise these errors instead of terminating the process. The
entry point in `pypixz.__main__` is the only place that reports them and
selects the exit status.
"""

from enum import IntEnum, unique
from typing import ClassVar, final

__all__ = (
    "ExitCode",
    "PixzError",
    "UsageError",
    "FatalError",
)


@final
@unique
class ExitCode(IntEnum):
    """Process exit statuses.

    ``USAGE_ERROR`` is reserved for malformed invocations and for ``--help``.
    ``FATAL_ERROR`` covers I/O failures and failures inside the engine.
    """

    SUCCESS = 0
    FATAL_ERROR = 1
    USAGE_ERROR = 2


class PixzError(Exception):
    """Base class for errors that end an invocation."""

    exit_code: ClassVar[ExitCode] = ExitCode.FATAL_ERROR


@final
class UsageError(PixzError):
    """Malformed flags, positional arguments or an unresolvable path.

    ``message`` is ``None`` when only the help text should be shown.
    """

    exit_code: ClassVar[ExitCode] = ExitCode.USAGE_ERROR

    def __init__(self, message: str | None = None):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message or ""


@final
class FatalError(PixzError):
    """An unrecoverable I/O or engine failure."""

    exit_code: ClassVar[ExitCode] = ExitCode.FATAL_ERROR

    def __init__(self, message: str, cause: OSError | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self):
        return self.message

    @classmethod
    def from_os_error(cls, message: str, path: str, error: OSError):
        """Build an error rendered as ``<message>: <path>: <strerror>``."""
        return cls(f"{message}: {path}: {error.strerror or error}", error)
