"""Recursive directory enumeration with bounded concurrency.

Directories are processed level by level from an explicit queue, so
deep trees never grow the call stack. Listing and ``lstat`` calls at
each level fan out through the bounded task runner.
"""

from __future__ import annotations

import asyncio
import os
from collections import deque
from pathlib import Path

from core.constants import DEFAULT_CONCURRENCY
from core.task_runner import run_bounded
from core.types import EntryKind, FileEntry

_PendingPath = tuple[Path, str]


async def walk_tree(root: str | Path, concurrency: int = DEFAULT_CONCURRENCY) -> list[FileEntry]:
    """Enumerate every node below ``root``.

    Symlinks are reported as entries but never followed; recursion only
    enters nodes whose own ``lstat`` says directory.

    Args:
        root: Directory to walk.
        concurrency: Maximum in-flight listing or stat calls.

    Returns:
        Entries for all descendants of ``root`` in unspecified order.

    Raises:
        OSError: If any listing or stat call fails.
    """
    entries: list[FileEntry] = []
    pending_dirs: deque[_PendingPath] = deque([(Path(os.path.abspath(root)), "")])
    while pending_dirs:
        level = list(pending_dirs)
        pending_dirs.clear()
        children = await _list_children(level, concurrency)
        for entry in await _stat_children(children, concurrency):
            entries.append(entry)
            if entry.kind is EntryKind.DIRECTORY:
                pending_dirs.append((entry.absolute, entry.relative))
    return entries


async def _list_children(directories: list[_PendingPath], concurrency: int) -> list[_PendingPath]:
    children: list[_PendingPath] = []

    async def list_directory(directory: _PendingPath) -> None:
        directory_path, relative_dir = directory
        names = await asyncio.to_thread(os.listdir, directory_path)
        for name in names:
            relative = os.path.join(relative_dir, name) if relative_dir else name
            children.append((directory_path / name, relative))

    await run_bounded(directories, list_directory, concurrency)
    return children


async def _stat_children(children: list[_PendingPath], concurrency: int) -> list[FileEntry]:
    entries: list[FileEntry] = []

    async def stat_child(child: _PendingPath) -> None:
        child_path, relative = child
        stats = await asyncio.to_thread(os.lstat, child_path)
        entries.append(FileEntry.from_stat(child_path, relative, stats))

    await run_bounded(children, stat_child, concurrency)
    return entries
