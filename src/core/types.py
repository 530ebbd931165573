"""Shared typed models.

This module defines immutable data models used by the walker, rewriter,
importer, and installer layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping

from core.constants import STORE_BUILD_TREE, STORE_INSTALL_TREE, STORE_STAGE_TREE
from core.errors import RelstoreRewriteError


class EntryKind(Enum):
    """Filesystem node kind captured from ``lstat``."""

    REGULAR = "regular"
    SYMLINK = "symlink"
    DIRECTORY = "directory"
    OTHER = "other"

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        if stat.S_ISLNK(mode):
            return cls.SYMLINK
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISREG(mode):
            return cls.REGULAR
        return cls.OTHER


class StoreTree(Enum):
    """Subdirectories under a store root."""

    BUILD = STORE_BUILD_TREE
    INSTALL = STORE_INSTALL_TREE
    STAGE = STORE_STAGE_TREE


@dataclass(frozen=True)
class FileEntry:
    """One node discovered by a tree walk.

    Attributes:
        relative: Path relative to the walk root.
        basename: Final path component.
        absolute: Absolute path of the node.
        kind: Node kind; symlinks are never dereferenced.
        mtime: Modification time in seconds.
        mode: Raw ``st_mode`` including file type bits.
        size: Size in bytes as reported by ``lstat``.
    """

    relative: str
    basename: str
    absolute: Path
    kind: EntryKind
    mtime: float
    mode: int
    size: int

    @classmethod
    def from_stat(cls, absolute: Path, relative: str, stats: os.stat_result) -> "FileEntry":
        """Snapshot an ``lstat`` result into an entry."""
        return cls(
            relative=relative,
            basename=absolute.name,
            absolute=absolute,
            kind=EntryKind.from_mode(stats.st_mode),
            mtime=stats.st_mtime,
            mode=stats.st_mode,
            size=stats.st_size,
        )


@dataclass(frozen=True)
class RewriteOperation:
    """Prefix pair for in-place relocation.

    Both prefixes must have the same UTF-8 byte length so rewritten
    files keep their exact size and internal offsets.
    """

    original_prefix: str
    replacement_prefix: str

    def __post_init__(self) -> None:
        original_length = len(self.original_prefix.encode("utf-8"))
        replacement_length = len(self.replacement_prefix.encode("utf-8"))
        if original_length != replacement_length:
            raise RelstoreRewriteError(
                "Cannot rewrite store prefix in place: "
                f"'{self.original_prefix}' is {original_length} bytes but "
                f"'{self.replacement_prefix}' is {replacement_length} bytes. "
                "Both prefixes must be padded to the same length."
            )

    @property
    def is_noop(self) -> bool:
        return self.original_prefix == self.replacement_prefix


@dataclass(frozen=True)
class RewriteSummary:
    """Counts of entries changed by one rewrite pass."""

    files_rewritten: int
    symlinks_rewritten: int


@dataclass(frozen=True)
class ImportedBuild:
    """One build published into the install tree."""

    build_id: str
    install_path: Path
    relocated: bool


@dataclass(frozen=True)
class SigningReport:
    """Outcome of re-signing binaries after relocation.

    Attributes:
        signed: Binaries that were re-signed.
        failed: Binaries whose signing failed, mapped to the error message.
    """

    signed: tuple[Path, ...] = ()
    failed: Mapping[Path, str] = field(default_factory=dict)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


class InstallStatus(Enum):
    """Terminal success states of a release install."""

    INSTALLED = "installed"
    ALREADY_INSTALLED = "already_installed"


@dataclass(frozen=True)
class InstallResult:
    """Release install outcome returned to SDK and CLI callers."""

    status: InstallStatus
    store_path: Path
    builds: tuple[ImportedBuild, ...] = ()
    signing: SigningReport | None = None
