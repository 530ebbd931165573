"""Path separator encodings searched for during relocation.

Build artifacts embed store paths with forward slashes, back slashes,
partially escaped separators, or string-literal escaped separators.
Each encoder maps a path to one of those spellings without changing
its length.
"""

from __future__ import annotations

from typing import Callable

from core.types import RewriteOperation


def all_forward(path: str) -> str:
    return path.replace("\\", "/")


def all_back(path: str) -> str:
    return path.replace("/", "\\")


def first_forward_rest_back(path: str) -> str:
    """Keep the first separator forward and turn the rest into back slashes."""
    parts = all_forward(path).split("/")
    return parts[0] + "/" + "\\".join(parts[1:])


def doubled_escaped(path: str) -> str:
    """Replace each doubled forward separator with an escaped back slash pair."""
    return all_forward(path).replace("//", "\\\\")


PREFIX_ENCODERS: tuple[Callable[[str], str], ...] = (
    all_forward,
    all_back,
    first_forward_rest_back,
    doubled_escaped,
)


def encoded_prefix_pairs(operation: RewriteOperation) -> list[tuple[bytes, bytes]]:
    """Return ``(original, replacement)`` byte pairs for every encoding.

    Pairs whose two sides are identical are dropped since they cannot
    change any content.

    Args:
        operation: Prefix pair to encode.

    Returns:
        Encoded byte pairs in encoder order.
    """
    pairs: list[tuple[bytes, bytes]] = []
    for encode in PREFIX_ENCODERS:
        original = encode(operation.original_prefix).encode("utf-8")
        replacement = encode(operation.replacement_prefix).encode("utf-8")
        if original != replacement:
            pairs.append((original, replacement))
    return pairs
