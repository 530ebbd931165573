"""Ad-hoc re-signing of relocated Mach-O binaries.

Rewriting store prefixes invalidates code signatures, which macOS on
arm64 enforces. Each binary is signed, moved out and back through a
temporary copy, then signed again; the platform caches signatures by
inode and rejects a binary that was only re-signed in place.
"""

from __future__ import annotations

import asyncio
import platform
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Any, Callable

from core.constants import (
    CODESIGN_COMMAND,
    DEFAULT_CONCURRENCY,
    MACHO_MAGIC_64,
    SIGNING_WORKAROUND_DIR_PREFIX,
)
from core.errors import RelstoreSigningError
from core.logging_config import get_logger
from core.task_runner import run_bounded
from core.types import EntryKind, FileEntry, SigningReport
from relocate.tree_walker import walk_tree

_LOGGER = get_logger(__name__)

CommandRunner = Callable[..., Any]


def requires_resigning(system: str | None = None, machine: str | None = None) -> bool:
    """Return True on the platform that enforces signatures on every binary."""
    runtime_system = system if system is not None else platform.system()
    runtime_machine = machine if machine is not None else platform.machine()
    return runtime_system == "Darwin" and runtime_machine == "arm64"


def is_macho_binary(path: Path) -> bool:
    """Check the native-endian 32-bit magic number at offset zero.

    Unreadable files are not treated as binaries.
    """
    try:
        with path.open("rb") as handle:
            header = handle.read(4)
    except OSError:
        return False
    if len(header) < 4:
        return False
    return int.from_bytes(header, sys.byteorder) == MACHO_MAGIC_64


async def find_macho_binaries(
    root: str | Path, concurrency: int = DEFAULT_CONCURRENCY
) -> list[Path]:
    """Collect regular files below ``root`` that carry the 64-bit Mach-O magic.

    Args:
        root: Directory to scan.
        concurrency: Maximum files inspected at once.

    Returns:
        Sorted binary paths.
    """
    entries = await walk_tree(root, concurrency)
    binaries: list[Path] = []

    async def inspect(entry: FileEntry) -> None:
        if entry.kind is not EntryKind.REGULAR:
            return
        if await asyncio.to_thread(is_macho_binary, entry.absolute):
            binaries.append(entry.absolute)

    await run_bounded(entries, inspect, concurrency)
    return sorted(binaries)


def sign_binary(path: Path, runner: CommandRunner = subprocess.run) -> None:
    """Re-sign one binary with the copy-out, copy-back workaround.

    Args:
        path: Binary to sign.
        runner: ``subprocess.run`` compatible callable.

    Raises:
        RelstoreSigningError: If codesign or any file copy fails.
    """
    try:
        _codesign(path, runner)
        with tempfile.TemporaryDirectory(prefix=SIGNING_WORKAROUND_DIR_PREFIX) as temp_dir:
            temp_copy = Path(temp_dir) / path.name
            shutil.copy2(path, temp_copy)
            path.unlink()
            shutil.copy2(temp_copy, path)
        _codesign(path, runner)
    except subprocess.CalledProcessError as error:
        raise RelstoreSigningError(
            f"codesign failed for {path} with exit code {error.returncode}"
        ) from error
    except OSError as error:
        raise RelstoreSigningError(f"Failed to re-sign {path}: {error}") from error


def sign_binaries(paths: list[Path], runner: CommandRunner = subprocess.run) -> SigningReport:
    """Re-sign each binary, recording failures instead of stopping.

    Args:
        paths: Binaries to sign.
        runner: ``subprocess.run`` compatible callable.

    Returns:
        Report of signed and failed binaries.
    """
    signed: list[Path] = []
    failed: dict[Path, str] = {}
    for path in paths:
        try:
            sign_binary(path, runner)
        except RelstoreSigningError as error:
            failed[path] = str(error)
            _LOGGER.error("binary_signing_failed", path=str(path), error=str(error))
            continue
        signed.append(path)
        _LOGGER.info("binary_signed", path=str(path))
    report = SigningReport(signed=tuple(signed), failed=failed)
    _LOGGER.info(
        "binary_signing_completed",
        signed=len(report.signed),
        failed=report.failed_count,
    )
    return report


def _codesign(path: Path, runner: CommandRunner) -> None:
    runner(
        [*CODESIGN_COMMAND, str(path)],
        check=True,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
