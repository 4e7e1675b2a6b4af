"""Binding of positional command-line arguments to input and output paths."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import final

from .errors import UsageError
from .meta import LOGGER
from .models import OperationMode
from .suffix import derive_path

__all__ = (
    "Binding",
    "bind",
)


@final
@dataclass(frozen=True, slots=True, kw_only=True)
class Binding:
    """Resolved paths of one invocation.

    Attributes:
        input: input path, or ``None`` for standard input
        output: output path, or ``None`` for standard output
        members: member paths to extract (extraction mode only)
        remove_input: whether the input is removed after a successful run
    """

    input: str | None
    output: str | None
    members: tuple[str, ...] = ()
    remove_input: bool = False


def bind(
    mode: OperationMode,
    positionals: Sequence[str],
    *,
    input: str | None = None,
    output: str | None = None,
    to_stdout: bool = False,
) -> Binding:
    """Combine positional arguments with the paths already given by flags.

    In extraction mode the positional arguments are member paths and are passed
    through untouched. Otherwise up to two arguments name the input and the
    output. A single argument names the input; the output name is then derived
    from it, unless an output was already chosen, and the input is scheduled for
    removal. Raises `UsageError` on an invalid combination.
    """

    if mode is OperationMode.EXTRACT:
        return Binding(input=input, output=output, members=tuple(positionals))
    if not positionals:
        if to_stdout and output is not None:
            raise UsageError("Multiple output files specified")
        return Binding(input=input, output=output)
    if len(positionals) > 2 or (mode is OperationMode.LIST and len(positionals) == 2):
        raise UsageError("Too many arguments")
    if input is not None:
        raise UsageError("Multiple input files specified")

    input = positionals[0]
    if len(positionals) == 2:
        if output is not None or to_stdout:
            raise UsageError("Multiple output files specified")
        return Binding(input=input, output=positionals[1])
    if mode is OperationMode.LIST or to_stdout or output is not None:
        return Binding(input=input, output=output)

    derived = derive_path(mode, input)
    if derived is None:
        raise UsageError("Unknown suffix")
    LOGGER.debug(f"Derived output '{derived}' from input '{input}'")
    return Binding(input=input, output=derived, remove_input=True)
