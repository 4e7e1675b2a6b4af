"""Command-line interface of pypixz.

This module provides the `ArgumentParser` factory that turns flags into a
configuration, `configure` that binds the positional arguments and validates
the result into a `RunConfig`, and the `main` coroutine that opens the
streams, dispatches to the engine and cleans up.
"""

from argparse import (
    SUPPRESS,
    ZERO_OR_MORE,
    Action,
    ArgumentError,
    ArgumentParser,
    ArgumentTypeError,
    Namespace,
)
from collections.abc import Callable, Sequence
from functools import partial, wraps
from math import isfinite
from typing import NoReturn

from anyio import Path, to_thread
from pydantic import ValidationError

from .binding import bind
from .dispatch import cleanup, dispatch
from .engine import Engine, XZEngine
from .errors import FatalError, UsageError
from .meta import LOGGER, VERSION
from .models import (
    DEFAULT_BLOCK_FRACTION,
    DEFAULT_LEVEL,
    MAX_BLOCK_FRACTION,
    OperationMode,
    RunConfig,
    Tuning,
)
from .streams import create_output, open_input

__all__ = (
    "configure",
    "main",
    "parse_args",
    "parser",
)


class _ArgumentParser(ArgumentParser):
    """`ArgumentParser` raising `UsageError` instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)


class _HelpAction(Action):
    """Help flag; the caller prints the help text with the usage status."""

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str = SUPPRESS,
        default: str = SUPPRESS,
        **kwargs,
    ):
        super().__init__(option_strings, dest, nargs=0, default=default, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        raise UsageError()


def _numeric(
    convert: Callable[[str], int | float],
    valid: Callable[[int | float], bool],
    message: str,
):
    def parse(value: str):
        try:
            ret = convert(value)
        except ValueError:
            raise ArgumentTypeError(message) from None
        if not valid(ret):
            raise ArgumentTypeError(message)
        return ret

    return parse


_processes = _numeric(
    int, lambda value: value >= 0, "Need a non-negative integer argument to -p"
)
_qsize = _numeric(
    int, lambda value: value > 0, "Need a positive integer argument to -q"
)
_block_fraction = _numeric(
    float,
    lambda value: isfinite(value) and 0 < value <= MAX_BLOCK_FRACTION,
    f"Need a positive floating-point argument to -f of at most {MAX_BLOCK_FRACTION:g}",
)


def configure(args: Namespace) -> RunConfig:
    """Bind the positional arguments and build the validated `RunConfig`."""

    binding = bind(
        args.mode,
        args.paths,
        input=args.input,
        output=args.output,
        to_stdout=args.to_stdout,
    )
    try:
        return RunConfig(
            mode=args.mode,
            input=binding.input,
            output=binding.output,
            tar=args.tar,
            keep=args.keep,
            extreme=args.extreme,
            level=args.level,
            tuning=Tuning(
                processes=args.processes,
                qsize=args.qsize,
                block_fraction=args.block_fraction,
            ),
            members=binding.members,
            remove_input=binding.remove_input,
        )
    except ValidationError as exc:
        raise UsageError(f"Invalid configuration: {exc}") from exc


async def main(config: RunConfig, *, engine: Engine | None = None) -> None:
    """Run one invocation described by `config`.

    Steps, in order:
    1. Open the input, then create the output with the input's permission bits.
    2. Dispatch to the engine on a worker thread.
    3. Remove the input if it was scheduled for removal.
    """

    engine = XZEngine() if engine is None else engine
    with open_input(config.input) as source:
        input_stat = None
        if config.input is not None:
            try:
                input_stat = await Path(config.input).stat()
            except OSError as exc:
                raise FatalError.from_os_error(
                    "can not open input file", config.input, exc
                ) from exc
        with create_output(config.output, input_stat) as sink:
            LOGGER.debug(
                f"Running {config.mode.value}: "
                f"'{config.input or '-'}' -> '{config.output or '-'}'"
            )
            await to_thread.run_sync(partial(dispatch, config, source, sink, engine))
    await cleanup(config)


def parser(parent: Callable[..., ArgumentParser] | None = None):
    """Return an ArgumentParser configured for the package CLI.

    If a `parent` callable is provided it will be used to construct the
    parser (useful when the command is embedded within another parser).
    """

    prog = __package__ or __name__

    parser = (_ArgumentParser if parent is None else parent)(
        prog=prog,
        description="parallel, indexing xz compression",
        add_help=False,
        allow_abbrev=False,
        exit_on_error=False,
    )
    parser.add_argument(
        "-h",
        "--help",
        action=_HelpAction,
        help="display this short help and exit",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"{prog} v{VERSION}",
        help="print version and exit",
    )
    for flags, mode, help in (
        (("-z", "--compress"), OperationMode.COMPRESS, "force compression"),
        (("-d", "--decompress"), OperationMode.DECOMPRESS, "force decompression"),
        (("-x", "--extract"), OperationMode.EXTRACT, "extract files"),
        (("-l", "--list"), OperationMode.LIST, "list files"),
    ):
        parser.add_argument(
            *flags,
            action="store_const",
            const=mode,
            default=OperationMode.COMPRESS,
            help=help,
            dest="mode",
        )
    parser.add_argument(
        "-c",
        "--stdout",
        action="store_true",
        default=False,
        help="write to standard output and don't delete input files",
        dest="to_stdout",
    )
    parser.add_argument(
        "-i",
        "--input",
        action="store",
        type=str,
        help="specify input file",
    )
    parser.add_argument(
        "-o",
        "--output",
        action="store",
        type=str,
        help="specify output file",
    )
    parser.add_argument(
        "-t",
        "--no-tar",
        action="store_false",
        default=True,
        help="don't assume input is in tar format",
        dest="tar",
    )
    parser.add_argument(
        "-k",
        "--keep",
        action="store_true",
        default=False,
        help="keep (don't delete) input files",
    )
    for flags, help in (
        (("-p", "--processes"), "use at most NUM threads; 0 uses one per core"),
        (("-T", "--threads"), "same as -p"),
    ):
        parser.add_argument(
            *flags,
            action="store",
            type=_processes,
            default=0,
            help=help,
            metavar="NUM",
            dest="processes",
        )
    parser.add_argument(
        "-f",
        "--block-fraction",
        action="store",
        type=_block_fraction,
        default=DEFAULT_BLOCK_FRACTION,
        help="block size as a multiple of the dictionary size",
        metavar="NUM",
        dest="block_fraction",
    )
    parser.add_argument(
        "-q",
        "--qsize",
        action="store",
        type=_qsize,
        help="at most NUM blocks in flight",
        metavar="NUM",
    )
    parser.add_argument(
        "-e",
        "--extreme",
        action="store_true",
        default=False,
        help="try to improve compression ratio by using more CPU time",
    )
    for level in range(10):
        flags = (f"-{level}",)
        if level == 0:
            flags += ("--fast",)
        elif level == 9:
            flags += ("--best",)
        parser.add_argument(
            *flags,
            action="store_const",
            const=level,
            default=DEFAULT_LEVEL,
            help=(
                "fastest compression level"
                if level == 0
                else "best/strongest compression level"
                if level == 9
                else f"compression level {level}"
            ),
            dest="level",
        )
    parser.add_argument(
        "paths",
        action="store",
        nargs=ZERO_OR_MORE,
        type=str,
        help="input and output files, or member paths with -x",
    )

    @wraps(main)
    async def invoke(args: Namespace, *, engine: Engine | None = None):
        await main(configure(args), engine=engine)

    parser.set_defaults(invoke=invoke)
    return parser


def parse_args(args: Sequence[str], argument_parser: ArgumentParser | None = None):
    """Parse `args`, raising `UsageError` for any malformed invocation.

    Flags and positional arguments may be interleaved.
    """

    try:
        if argument_parser is None:
            argument_parser = parser()
        return argument_parser.parse_intermixed_args(args)
    except ArgumentError as exc:
        raise UsageError(str(exc)) from exc
