"""Output (or input) name derivation from filename suffixes.

The rules are an ordered table. Only rules for the current mode are tried,
top to bottom, and the first rule whose suffix ends the known name wins. The
tar-specific rules come before the generic ones so that tarballs get the
tarball naming convention.
"""

from collections.abc import Iterable

from .models import OperationMode, SuffixRule

__all__ = (
    "SUFFIX_RULES",
    "derive_path",
    "substitute_suffix",
)

SUFFIX_RULES = (
    SuffixRule(mode=OperationMode.DECOMPRESS, match=".tar.xz", replacement=".tar"),
    SuffixRule(mode=OperationMode.DECOMPRESS, match=".tpxz", replacement=".tar"),
    SuffixRule(mode=OperationMode.DECOMPRESS, match=".xz", replacement=""),
    SuffixRule(mode=OperationMode.COMPRESS, match=".tar", replacement=".tpxz"),
    SuffixRule(mode=OperationMode.COMPRESS, match="", replacement=".xz"),
)


def substitute_suffix(path: str, match: str, replacement: str) -> str | None:
    """Replace the suffix `match` of `path` with `replacement`.

    Returns ``None`` when `path` does not end with `match`, or when the
    substitution would leave an empty name.
    """

    if not path.endswith(match):
        return None
    ret = path[: len(path) - len(match)] + replacement
    return ret or None


def derive_path(
    mode: OperationMode,
    path: str,
    rules: Iterable[SuffixRule] = SUFFIX_RULES,
) -> str | None:
    """Derive the counterpart of `path` for `mode`, or ``None`` if unknown."""

    for rule in rules:
        if rule.mode is not mode:
            continue
        derived = substitute_suffix(path, rule.match, rule.replacement)
        if derived is not None:
            return derived
    return None
