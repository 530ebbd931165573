"""Release install orchestration.

An install moves through check, store initialization, build import,
and wrapper rewriting in that order. Any failure aborts the run;
already imported builds and rewritten files are not rolled back.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from core.config import RelstoreConfig
from core.constants import BIN_STORE_PATH_FILE_NAME
from core.errors import RelstoreConfigError, RelstoreRewriteError
from core.logging_config import get_logger
from core.task_runner import run_bounded
from core.types import (
    EntryKind,
    FileEntry,
    ImportedBuild,
    InstallResult,
    InstallStatus,
    SigningReport,
)
from relocate.binary_signing import find_macho_binaries, requires_resigning, sign_binaries
from relocate.path_rewriter import rewrite_paths
from relocate.tree_walker import walk_tree
from store.build_importer import import_build
from store.store_layout import init_store
from store.store_path import store_path_for_config

_LOGGER = get_logger(__name__)


class ReleaseInstaller:
    """Installer for one release package root."""

    def __init__(self, config: RelstoreConfig) -> None:
        self._config = config

    async def install(self) -> InstallResult:
        """Install all exported builds into the store.

        Returns:
            ``ALREADY_INSTALLED`` when the padded store already exists,
            otherwise ``INSTALLED`` with the imported builds.

        Raises:
            RelstoreConfigError: If there are no exported builds or the
                release path is too deep to pad.
            RelstoreError: If any build import or rewrite fails.
            OSError: If any filesystem call fails.
        """
        store_path = self._check()
        if store_path is None:
            existing_store_path = store_path_for_config(self._config)
            _LOGGER.info("release_already_installed", store_path=existing_store_path)
            return InstallResult(
                status=InstallStatus.ALREADY_INSTALLED,
                store_path=Path(existing_store_path),
            )
        await init_store(store_path)
        builds = await self._import_builds()
        await self._rewrite_bin_wrappers()
        _LOGGER.info("release_installed", store_path=store_path, builds=len(builds))
        return InstallResult(
            status=InstallStatus.INSTALLED,
            store_path=Path(store_path),
            builds=tuple(sorted(builds, key=lambda build: build.build_id)),
        )

    async def resign_binaries(self) -> SigningReport:
        """Re-sign every Mach-O binary under the release path."""
        binaries = await find_macho_binaries(self._config.release_path, self._config.concurrency)
        return await asyncio.to_thread(sign_binaries, binaries)

    def _check(self) -> str | None:
        """Validate the release and pick the store root.

        Returns:
            Store root to install into, or None when already installed.
        """
        export_path = self._config.export_path
        if not export_path.exists():
            raise RelstoreConfigError(f"no builds found: {export_path} does not exist")
        if not self._config.rewrite_prefix:
            return str(self._config.unpadded_store_path)
        store_path = store_path_for_config(self._config)
        if os.path.exists(store_path):
            return None
        return store_path

    async def _import_builds(self) -> list[ImportedBuild]:
        entries = await walk_tree(self._config.export_path, self._config.concurrency)
        archives = [entry for entry in entries if entry.kind is EntryKind.REGULAR]
        relocate_into = store_path_for_config(self._config) if self._config.rewrite_prefix else None
        builds: list[ImportedBuild] = []

        async def import_archive(entry: FileEntry) -> None:
            builds.append(await import_build(entry.absolute, relocate_into, self._config))

        await run_bounded(archives, import_archive, self._config.concurrency)
        return builds

    async def _rewrite_bin_wrappers(self) -> None:
        if not self._config.rewrite_prefix:
            return
        bin_path = self._config.bin_path
        store_path = store_path_for_config(self._config)
        previous_store_path = await asyncio.to_thread(_read_bin_store_path, bin_path)
        summary = await rewrite_paths(
            bin_path, previous_store_path, store_path, self._config.concurrency
        )
        _LOGGER.info(
            "bin_wrappers_rewritten",
            bin_path=str(bin_path),
            files_rewritten=summary.files_rewritten,
            symlinks_rewritten=summary.symlinks_rewritten,
        )


def install_release(config: RelstoreConfig, sign: bool | None = None) -> InstallResult:
    """Install a release and re-sign binaries where the platform requires it.

    Args:
        config: Runtime configuration.
        sign: Force signing on or off; defaults to platform detection.

    Returns:
        Install outcome, including the signing report when signing ran.
    """
    return asyncio.run(_install_release(config, sign))


async def _install_release(config: RelstoreConfig, sign: bool | None) -> InstallResult:
    installer = ReleaseInstaller(config)
    result = await installer.install()
    if result.status is InstallStatus.ALREADY_INSTALLED:
        return result
    should_sign = requires_resigning() if sign is None else sign
    if not should_sign:
        return result
    signing = await installer.resign_binaries()
    return InstallResult(
        status=result.status,
        store_path=result.store_path,
        builds=result.builds,
        signing=signing,
    )


def _read_bin_store_path(bin_path: Path) -> str:
    record_path = bin_path / BIN_STORE_PATH_FILE_NAME
    try:
        return record_path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise RelstoreRewriteError(
            f"Cannot relocate wrapper scripts: unreadable store path record at {record_path}."
        ) from error
