"""Parallel, indexing xz compression from the command line.

Package metadata lives in `pypixz.meta`; the command-line interface in
`pypixz.main`.
"""

__all__ = ()
