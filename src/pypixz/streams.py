"""Opening of the input and output streams.

Output files created from a real input file are requested with the permission
bits of the input; otherwise the process umask decides.
"""

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from os import O_CREAT, O_TRUNC, O_WRONLY, fdopen, stat_result
from os import open as os_open
from stat import S_IMODE
from typing import BinaryIO

from .errors import FatalError

__all__ = (
    "open_input",
    "create_output",
)

_CREATE_FLAGS = O_CREAT | O_WRONLY | O_TRUNC


@contextmanager
def open_input(path: str | None) -> Iterator[BinaryIO]:
    """Open `path` for binary reading, or use standard input for ``None``."""

    if path is None:
        yield sys.stdin.buffer
        return
    try:
        file = open(path, mode="rb")
    except OSError as exc:
        raise FatalError.from_os_error("can not open input file", path, exc) from exc
    with file:
        yield file


@contextmanager
def create_output(
    path: str | None, input_stat: stat_result | None = None
) -> Iterator[BinaryIO]:
    """Create `path` for binary writing, or use standard output for ``None``.

    With `input_stat` the file is created requesting exactly the permission
    bits of the input; otherwise the default creation mode applies. Standard
    output is flushed, not closed, on exit.
    """

    if path is None:
        sink = sys.stdout.buffer
        try:
            yield sink
        finally:
            sink.flush()
        return
    try:
        if input_stat is None:
            file = open(path, mode="wb")
        else:
            file = fdopen(
                os_open(path, _CREATE_FLAGS, S_IMODE(input_stat.st_mode)), "wb"
            )
    except OSError as exc:
        raise FatalError.from_os_error("can not open output file", path, exc) from exc
    with file:
        yield file
