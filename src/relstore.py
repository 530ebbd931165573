"""Public SDK surface for Relstore.

This module provides a stable import path for installer callers.
It re-exports the configuration, installer, and relocation helpers.
"""

from __future__ import annotations

from core.config import RelstoreConfig
from core.types import (
    EntryKind,
    FileEntry,
    ImportedBuild,
    InstallResult,
    InstallStatus,
    RewriteOperation,
    RewriteSummary,
    SigningReport,
    StoreTree,
)
from install.release_installer import ReleaseInstaller, install_release
from relocate.path_rewriter import rewrite_paths
from relocate.tree_walker import walk_tree
from store.build_importer import import_build
from store.store_path import resolve_store_path, store_path_for_config

__all__ = [
    "EntryKind",
    "FileEntry",
    "ImportedBuild",
    "InstallResult",
    "InstallStatus",
    "ReleaseInstaller",
    "RelstoreConfig",
    "RewriteOperation",
    "RewriteSummary",
    "SigningReport",
    "StoreTree",
    "import_build",
    "install_release",
    "resolve_store_path",
    "rewrite_paths",
    "store_path_for_config",
    "walk_tree",
]
