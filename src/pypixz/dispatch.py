"""Dispatch of a resolved invocation to the engine, and input cleanup."""

from typing import BinaryIO, assert_never

from anyio import Path

from .engine import Engine
from .errors import UsageError
from .meta import LOGGER
from .models import OperationMode, RunConfig

__all__ = (
    "dispatch",
    "cleanup",
)


def dispatch(config: RunConfig, source: BinaryIO, sink: BinaryIO, engine: Engine):
    """Invoke exactly one engine operation for `config.mode`.

    Compression refuses to write to an interactive terminal.
    """

    LOGGER.debug(f"Dispatching {config.mode.value}")
    match config.mode:
        case OperationMode.COMPRESS:
            if sink.isatty():
                raise UsageError("Refusing to output to a TTY")
            engine.compress(
                source,
                sink,
                tar=config.tar,
                preset=config.preset,
                tuning=config.tuning,
            )
        case OperationMode.DECOMPRESS:
            engine.decompress(source, sink, tar=config.tar, members=())
        case OperationMode.EXTRACT:
            engine.decompress(source, sink, tar=config.tar, members=config.members)
        case OperationMode.LIST:
            engine.list(source, sink, tar=config.tar)
        case _:
            assert_never(config.mode)


async def cleanup(config: RunConfig) -> bool:
    """Remove the input after a successful run if it was scheduled for removal.

    A failed removal is logged as a warning and does not fail the run. Returns
    whether the input was removed.
    """

    if config.input is None or not config.remove_input or config.keep:
        return False
    try:
        await Path(config.input).unlink()
    except OSError as exc:
        LOGGER.warning(
            f"can not remove input file: {config.input}: {exc.strerror or exc}"
        )
        return False
    LOGGER.debug(f"Removed input file '{config.input}'")
    return True
