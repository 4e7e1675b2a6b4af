"""Tests for dispatching to the engine and for input cleanup.

A recording engine stands in for the real one so that only the arguments
passed across the engine boundary are checked.
"""

import logging
from collections.abc import Sequence
from io import BytesIO
from lzma import PRESET_EXTREME
from pathlib import Path
from typing import Any, BinaryIO

import pytest

from pypixz.dispatch import cleanup, dispatch
from pypixz.errors import UsageError
from pypixz.models import OperationMode, RunConfig, Tuning

__all__ = ()


class _RecordingEngine:
    """Engine that records the operations it is asked to perform."""

    def __init__(self) -> None:
        """Start without recorded calls."""
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def compress(
        self,
        source: BinaryIO,
        sink: BinaryIO,
        *,
        tar: bool,
        preset: int,
        tuning: Tuning,
    ) -> None:
        """Record a compression."""
        self.calls.append(
            ("compress", {"tar": tar, "preset": preset, "tuning": tuning})
        )

    def decompress(
        self, source: BinaryIO, sink: BinaryIO, *, tar: bool, members: Sequence[str]
    ) -> None:
        """Record a decompression."""
        self.calls.append(("decompress", {"tar": tar, "members": tuple(members)}))

    def list(self, source: BinaryIO, sink: BinaryIO, *, tar: bool) -> None:
        """Record a listing."""
        self.calls.append(("list", {"tar": tar}))


class _Terminal(BytesIO):
    """Byte stream claiming to be an interactive terminal."""

    def isatty(self) -> bool:
        """Pretend to be a terminal."""
        return True


def test_dispatch_compress_passes_settings_through() -> None:
    """Compression receives tar awareness, the preset and the tuning unchanged."""
    engine = _RecordingEngine()
    tuning = Tuning(processes=3, qsize=7, block_fraction=0.5)
    config = RunConfig(level=4, extreme=True, tar=False, tuning=tuning)

    dispatch(config, BytesIO(), BytesIO(), engine)

    assert engine.calls == [
        ("compress", {"tar": False, "preset": 4 | PRESET_EXTREME, "tuning": tuning})
    ]


def test_dispatch_compress_refuses_terminal() -> None:
    """Compressed data is never written to a terminal."""
    engine = _RecordingEngine()
    with pytest.raises(UsageError, match="Refusing to output to a TTY"):
        dispatch(RunConfig(), BytesIO(), _Terminal(), engine)
    assert engine.calls == []


@pytest.mark.parametrize(
    "config,expected",
    [
        (
            RunConfig(mode=OperationMode.DECOMPRESS),
            ("decompress", {"tar": True, "members": ()}),
        ),
        (
            RunConfig(mode=OperationMode.DECOMPRESS, tar=False),
            ("decompress", {"tar": False, "members": ()}),
        ),
        (
            RunConfig(mode=OperationMode.EXTRACT, members=("a", "b/c")),
            ("decompress", {"tar": True, "members": ("a", "b/c")}),
        ),
        (
            RunConfig(mode=OperationMode.EXTRACT),
            ("decompress", {"tar": True, "members": ()}),
        ),
        (RunConfig(mode=OperationMode.LIST), ("list", {"tar": True})),
    ],
)
def test_dispatch_other_modes(
    config: RunConfig, expected: tuple[str, dict[str, Any]]
) -> None:
    """Every mode invokes exactly one engine operation."""
    engine = _RecordingEngine()
    dispatch(config, BytesIO(), _Terminal(), engine)
    assert engine.calls == [expected]


@pytest.mark.asyncio
async def test_cleanup_removes_scheduled_input(tmp_path: Path) -> None:
    """An input scheduled for removal is removed."""
    source = tmp_path / "input"
    source.write_bytes(b"data")
    config = RunConfig(input=str(source), output="out.xz", remove_input=True)

    assert await cleanup(config)
    assert not source.exists()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"remove_input": True, "keep": True},
        {"remove_input": False},
    ],
)
async def test_cleanup_keeps_input(tmp_path: Path, kwargs: dict[str, bool]) -> None:
    """The input stays when kept or when it was not scheduled for removal."""
    source = tmp_path / "input"
    source.write_bytes(b"data")
    config = RunConfig(input=str(source), output="out.xz", **kwargs)

    assert not await cleanup(config)
    assert source.exists()


@pytest.mark.asyncio
async def test_cleanup_failure_is_a_warning(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Failing to remove the input is logged and otherwise ignored."""
    source = tmp_path / "missing"
    config = RunConfig(input=str(source), output="out.xz", remove_input=True)

    with caplog.at_level(logging.WARNING, logger="pypixz"):
        assert not await cleanup(config)

    assert f"can not remove input file: {source}" in caplog.text
