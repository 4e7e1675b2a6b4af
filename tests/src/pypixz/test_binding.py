"""Tests for binding positional arguments to input and output paths.

Covers standard stream defaults, derived outputs, removal scheduling, the
pass-through of member paths and every rejected combination.
"""

import pytest

from pypixz.binding import Binding, bind
from pypixz.errors import ExitCode, UsageError
from pypixz.models import OperationMode

__all__ = ()


def test_no_positionals_uses_standard_streams() -> None:
    """Without arguments both paths stay on the standard streams."""
    assert bind(OperationMode.COMPRESS, []) == Binding(input=None, output=None)


def test_no_positionals_keeps_flag_paths() -> None:
    """Paths given by flags are kept when no positional argument remains."""
    binding = bind(OperationMode.DECOMPRESS, [], input="a.xz", output="a")
    assert binding == Binding(input="a.xz", output="a")


def test_single_positional_derives_output_and_schedules_removal() -> None:
    """One argument becomes the input and the output name is derived."""
    binding = bind(OperationMode.COMPRESS, ["foo.tar"])
    assert binding.input == "foo.tar"
    assert binding.output == "foo.tpxz"
    assert binding.remove_input


def test_single_positional_decompress() -> None:
    """Decompression strips the compressed suffix."""
    binding = bind(OperationMode.DECOMPRESS, ["foo.txt.xz"])
    assert binding == Binding(input="foo.txt.xz", output="foo.txt", remove_input=True)


def test_single_positional_unknown_suffix() -> None:
    """A name without a known suffix cannot be decompressed automatically."""
    with pytest.raises(UsageError, match="Unknown suffix") as info:
        bind(OperationMode.DECOMPRESS, ["foo.gz"])
    assert info.value.exit_code == ExitCode.USAGE_ERROR


def test_single_positional_list_never_derives() -> None:
    """Listing reads the argument and writes to standard output."""
    binding = bind(OperationMode.LIST, ["foo.tpxz"])
    assert binding == Binding(input="foo.tpxz", output=None)


def test_single_positional_to_stdout() -> None:
    """Writing to standard output neither derives nor removes."""
    binding = bind(OperationMode.COMPRESS, ["foo"], to_stdout=True)
    assert binding == Binding(input="foo", output=None)


def test_single_positional_with_output_flag() -> None:
    """An explicit output is used instead of a derived one."""
    binding = bind(OperationMode.COMPRESS, ["foo"], output="bar.xz")
    assert binding == Binding(input="foo", output="bar.xz")


def test_two_positionals() -> None:
    """Two arguments are the input and the output; nothing is removed."""
    binding = bind(OperationMode.COMPRESS, ["in", "out.xz"])
    assert binding == Binding(input="in", output="out.xz")


@pytest.mark.parametrize(
    "mode,positionals",
    [
        (OperationMode.LIST, ["a.tpxz", "b"]),
        (OperationMode.COMPRESS, ["a", "b", "c"]),
        (OperationMode.DECOMPRESS, ["a.xz", "b", "c"]),
    ],
)
def test_too_many_arguments(mode: OperationMode, positionals: list[str]) -> None:
    """Listing takes one argument; the other modes at most two."""
    with pytest.raises(UsageError, match="Too many arguments"):
        bind(mode, positionals)


def test_duplicate_input() -> None:
    """An input given by flag and by argument is rejected."""
    with pytest.raises(UsageError, match="Multiple input files specified"):
        bind(OperationMode.COMPRESS, ["b"], input="a")


def test_duplicate_output() -> None:
    """An output given by flag and by argument is rejected."""
    with pytest.raises(UsageError, match="Multiple output files specified"):
        bind(OperationMode.COMPRESS, ["a", "b.xz"], output="c.xz")


def test_duplicate_output_with_stdout() -> None:
    """An explicit output conflicts with writing to standard output."""
    with pytest.raises(UsageError, match="Multiple output files specified"):
        bind(OperationMode.COMPRESS, ["a", "b.xz"], to_stdout=True)
    with pytest.raises(UsageError, match="Multiple output files specified"):
        bind(OperationMode.COMPRESS, [], output="b.xz", to_stdout=True)


def test_extract_passes_members_through() -> None:
    """In extraction mode the arguments are member paths."""
    binding = bind(
        OperationMode.EXTRACT,
        ["dir/a", "b", "c", "d"],
        input="x.tpxz",
    )
    assert binding == Binding(
        input="x.tpxz", output=None, members=("dir/a", "b", "c", "d")
    )
    assert bind(OperationMode.EXTRACT, []).members == ()
