"""Padded store path resolution.

A store root is padded to one fixed byte length so a later relocation
can swap it for another root without changing any file size. The
length is chosen so the runtime interpreter path still fits in a
shebang line.
"""

from __future__ import annotations

import os

from core.config import RelstoreConfig
from core.constants import STORE_PADDING_CHAR, STORE_VERSION
from core.errors import RelstoreConfigError


def resolve_store_path(prefix: str | os.PathLike[str], padding_length: int) -> str:
    """Return the store root for ``prefix`` padded to ``padding_length`` bytes.

    Args:
        prefix: Directory the store lives under.
        padding_length: Target byte length of the padded path.

    Returns:
        ``prefix/<store version>`` right-padded with ``_``.

    Raises:
        RelstoreConfigError: If the unpadded path is already too long.
    """
    store_path = os.path.join(os.fspath(prefix), str(STORE_VERSION))
    store_path_length = len(store_path.encode("utf-8"))
    if store_path_length > padding_length:
        raise RelstoreConfigError(
            f"Store prefix path is too deep in the filesystem: '{store_path}' is "
            f"{store_path_length} bytes but at most {padding_length} fit. "
            "Artifacts cannot be relocated; install the release under a shorter path."
        )
    return store_path + STORE_PADDING_CHAR * (padding_length - store_path_length)


def store_path_for_config(config: RelstoreConfig) -> str:
    """Return the padded store root for the configured release path."""
    return resolve_store_path(config.release_path, config.padding_length)
