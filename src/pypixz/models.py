"""Typed configuration models for one invocation.

`RunConfig` is built once from the parsed command line and is never mutated
afterwards; every component receives the values it needs from it explicitly.
Using pydantic keeps the numeric invariants (level range, positive queue size,
positive block fraction) checked in a single place.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from lzma import PRESET_DEFAULT, PRESET_EXTREME
from typing import Annotated, final

from pydantic import BaseModel, Field, NonNegativeInt, PositiveInt

__all__ = (
    "DEFAULT_BLOCK_FRACTION",
    "MAX_BLOCK_FRACTION",
    "DEFAULT_LEVEL",
    "OperationMode",
    "SuffixRule",
    "Tuning",
    "RunConfig",
)

DEFAULT_BLOCK_FRACTION = 2.0
MAX_BLOCK_FRACTION = 1024.0
DEFAULT_LEVEL = PRESET_DEFAULT


@final
@unique
class OperationMode(Enum):
    """The single high-level action selected for an invocation."""

    COMPRESS = "compress"
    DECOMPRESS = "decompress"
    EXTRACT = "extract"
    LIST = "list"


@final
@dataclass(frozen=True, slots=True, kw_only=True)
class SuffixRule:
    """Maps a recognized filename ending to its counterpart for one mode."""

    mode: OperationMode
    match: str
    replacement: str


class Tuning(BaseModel):
    """Engine pipeline settings, passed through to the engine unchanged.

    ``processes`` of 0 means one worker per available processor. ``qsize`` of
    ``None`` lets the engine pick its own bound. ``block_fraction`` is finite
    and at most ``MAX_BLOCK_FRACTION``.
    """

    processes: NonNegativeInt = 0
    qsize: PositiveInt | None = None
    block_fraction: Annotated[
        float, Field(gt=0, le=MAX_BLOCK_FRACTION, allow_inf_nan=False)
    ] = DEFAULT_BLOCK_FRACTION

    model_config = {"frozen": True}


class RunConfig(BaseModel):
    """Immutable, validated configuration of one invocation.

    ``input`` and ``output`` of ``None`` stand for the standard input and
    output streams. ``members`` is only meaningful in extraction mode.
    ``remove_input`` is set when the output name was derived from the input
    name; the input is then removed after a successful run unless ``keep``.
    """

    mode: OperationMode = OperationMode.COMPRESS
    input: str | None = None
    output: str | None = None
    tar: bool = True
    keep: bool = False
    extreme: bool = False
    level: Annotated[int, Field(ge=0, le=9)] = DEFAULT_LEVEL
    tuning: Tuning = Tuning()
    members: tuple[str, ...] = ()
    remove_input: bool = False

    model_config = {"frozen": True}

    @property
    def preset(self) -> int:
        """Compression preset combining the level and the extreme flag."""
        return self.level | PRESET_EXTREME if self.extreme else self.level
