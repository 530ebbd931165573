"""Store directory layout helpers."""

from __future__ import annotations

import asyncio
from pathlib import Path

from core.errors import RelstoreStoreError
from core.logging_config import get_logger
from core.types import StoreTree

_LOGGER = get_logger(__name__)


def store_tree_path(store_path: str | Path, tree: StoreTree) -> Path:
    return Path(store_path) / tree.value


async def init_store(store_path: str | Path) -> Path:
    """Create the store root and its build, install, and stage trees.

    Existing directories are kept.

    Args:
        store_path: Store root to create.

    Returns:
        Store root path.

    Raises:
        RelstoreStoreError: If a directory cannot be created.
    """
    store_root = Path(store_path)
    try:
        await asyncio.to_thread(store_root.mkdir, parents=True, exist_ok=True)
        await asyncio.gather(
            *(
                asyncio.to_thread(store_tree_path(store_root, tree).mkdir, exist_ok=True)
                for tree in StoreTree
            )
        )
    except OSError as error:
        raise RelstoreStoreError(f"Failed to initialize store at {store_root}: {error}") from error
    _LOGGER.info("store_initialized", store_path=str(store_root))
    return store_root
