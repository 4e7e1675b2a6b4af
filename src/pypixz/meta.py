"""Package metadata and configuration.

This module contains package-level metadata and configuration constants. Modules
should import package metadata directly from this module instead of relying on
re-exports from `pypixz.__init__` (for example: ``from pypixz.meta import VERSION``).
"""

from logging import getLogger

__all__ = (
    "AUTHORS",
    "NAME",
    "VERSION",
    "LOGGER",
    "CHUNK_SIZE",
)


# update `pyproject.toml`
AUTHORS = (
    {
        "name": "pypixz contributors",
        "email": "pypixz@users.noreply.github.com",
    },
)
NAME = "pypixz"
VERSION = "1.0.0"

LOGGER = getLogger(NAME)
CHUNK_SIZE = 1 << 16
