"""Import of one exported build archive into the store.

Each archive is extracted into the stage tree, relocated there when a
padded store root is given, and then renamed into the install tree so
readers never observe a partially imported build. A failed import
leaves its staging directory behind for inspection.
"""

from __future__ import annotations

import asyncio
import os
import tarfile
from pathlib import Path

from core.config import RelstoreConfig
from core.constants import ARCHIVE_SUFFIX, BUILD_STORE_PREFIX_FILE
from core.errors import RelstoreImportError
from core.logging_config import get_logger
from core.types import ImportedBuild, StoreTree
from relocate.path_rewriter import rewrite_paths
from store.store_layout import store_tree_path

_LOGGER = get_logger(__name__)


def build_id_from_archive(archive_path: str | Path) -> str:
    """Derive the build id from an archive file name."""
    name = os.path.basename(archive_path)
    if name.endswith(ARCHIVE_SUFFIX):
        return name[: -len(ARCHIVE_SUFFIX)]
    return name


async def import_build(
    archive_path: str | Path,
    store_path: str | None,
    config: RelstoreConfig,
) -> ImportedBuild:
    """Extract, optionally relocate, and publish one build archive.

    Args:
        archive_path: Exported ``<build id>.tar.gz`` archive.
        store_path: Padded store root to relocate into, or None to
            import into the unpadded store without rewriting paths.
        config: Runtime configuration.

    Returns:
        The published build.

    Raises:
        RelstoreImportError: If extraction fails or the stash record is missing.
        RelstoreRewriteError: If the stash record cannot be swapped in place.
        OSError: If staging, rewriting, or publishing fails.
    """
    build_id = build_id_from_archive(archive_path)
    relocated = store_path is not None
    store_root = Path(store_path) if store_path is not None else config.unpadded_store_path
    stage_tree = store_tree_path(store_root, StoreTree.STAGE)
    build_stage_path = stage_tree / build_id
    build_final_path = store_tree_path(store_root, StoreTree.INSTALL) / build_id
    _LOGGER.info("build_import_started", build_id=build_id, relocated=relocated)

    await asyncio.to_thread(build_stage_path.mkdir)
    await asyncio.to_thread(extract_archive, Path(archive_path), stage_tree)
    if store_path is not None:
        previous_store_path = await asyncio.to_thread(read_stash_record, build_stage_path)
        await rewrite_paths(
            build_stage_path, previous_store_path, store_path, config.concurrency
        )
    await asyncio.to_thread(os.rename, build_stage_path, build_final_path)
    _LOGGER.info("build_import_completed", build_id=build_id, install_path=str(build_final_path))
    return ImportedBuild(build_id=build_id, install_path=build_final_path, relocated=relocated)


def extract_archive(archive_path: Path, destination: Path) -> None:
    """Extract a gzip-compressed or plain tarball into ``destination``.

    Args:
        archive_path: Tarball to read.
        destination: Directory receiving the archive members.

    Raises:
        RelstoreImportError: If the archive cannot be read or extracted.
    """
    try:
        with tarfile.open(archive_path, "r:*") as archive:
            archive.extractall(destination, filter="tar")
    except (tarfile.TarError, OSError) as error:
        raise RelstoreImportError(
            f"Failed to extract build archive {archive_path}: {error}"
        ) from error


def read_stash_record(build_path: Path) -> str:
    """Read the store prefix a build was produced under.

    Args:
        build_path: Staged build directory.

    Returns:
        Raw recorded store prefix.

    Raises:
        RelstoreImportError: If the record file is missing, unreadable, or
            not valid UTF-8.
    """
    record_path = build_path.joinpath(*BUILD_STORE_PREFIX_FILE)
    try:
        return record_path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise RelstoreImportError(
            f"Build at {build_path} has no readable store prefix record at {record_path}. "
            "The archive was not exported with relocation metadata."
        ) from error
