"""In-place store prefix rewriting.

This module replaces an absolute store prefix inside regular file
content and symlink targets under a directory tree. Content is handled
as raw bytes and every replacement keeps the file length unchanged.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from core.constants import DEFAULT_CONCURRENCY, OWNER_WRITE_BIT
from core.logging_config import get_logger
from core.task_runner import run_bounded
from core.types import EntryKind, FileEntry, RewriteOperation, RewriteSummary
from relocate.prefix_encodings import encoded_prefix_pairs
from relocate.tree_walker import walk_tree

_LOGGER = get_logger(__name__)


async def rewrite_paths(
    root: str | Path,
    original_prefix: str,
    replacement_prefix: str,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> RewriteSummary:
    """Rewrite ``original_prefix`` to ``replacement_prefix`` below ``root``.

    Args:
        root: Directory whose files and symlinks are rewritten.
        original_prefix: Store prefix recorded when the files were built.
        replacement_prefix: Store prefix of the current install.
        concurrency: Maximum files processed at once.

    Returns:
        Counts of rewritten files and symlinks.

    Raises:
        RelstoreRewriteError: If the prefixes differ in byte length.
        OSError: If any filesystem call fails.
    """
    operation = RewriteOperation(original_prefix, replacement_prefix)
    if operation.is_noop:
        return RewriteSummary(files_rewritten=0, symlinks_rewritten=0)
    entries = await walk_tree(root, concurrency)
    rewritten_files: list[Path] = []
    rewritten_symlinks: list[Path] = []

    async def rewrite_entry(entry: FileEntry) -> None:
        # Directories and special files are inert.
        if entry.kind is EntryKind.REGULAR:
            if await asyncio.to_thread(rewrite_file_prefix, entry, operation):
                rewritten_files.append(entry.absolute)
        elif entry.kind is EntryKind.SYMLINK:
            if await asyncio.to_thread(rewrite_symlink_prefix, entry.absolute, operation):
                rewritten_symlinks.append(entry.absolute)

    await run_bounded(entries, rewrite_entry, concurrency)
    summary = RewriteSummary(
        files_rewritten=len(rewritten_files),
        symlinks_rewritten=len(rewritten_symlinks),
    )
    _LOGGER.info(
        "paths_rewritten",
        root=str(root),
        entries=len(entries),
        files_rewritten=summary.files_rewritten,
        symlinks_rewritten=summary.symlinks_rewritten,
    )
    return summary


def rewrite_file_prefix(entry: FileEntry, operation: RewriteOperation) -> bool:
    """Rewrite every encoded prefix occurrence in one regular file.

    The file is only written when at least one encoding matched. Write
    permission is granted to the owner for the write and the original
    mode is restored afterwards.

    Args:
        entry: Walked regular file entry.
        operation: Prefix pair to apply.

    Returns:
        True when the file content changed.
    """
    content = bytearray(entry.absolute.read_bytes())
    changed = False
    for original, replacement in encoded_prefix_pairs(operation):
        if substitute_prefix(content, original, replacement):
            changed = True
    if not changed:
        return False
    permission_bits = entry.mode & 0o7777
    os.chmod(entry.absolute, permission_bits | OWNER_WRITE_BIT)
    try:
        entry.absolute.write_bytes(content)
    finally:
        os.chmod(entry.absolute, permission_bits)
    return True


def substitute_prefix(content: bytearray, original: bytes, replacement: bytes) -> bool:
    """Overwrite each occurrence of ``original`` in ``content`` in place.

    The search restarts from the beginning of the buffer after every
    replacement, so matches formed by a replacement are also rewritten.

    Args:
        content: Mutable file content.
        original: Encoded prefix to find.
        replacement: Encoded prefix of equal length to write.

    Returns:
        True when at least one occurrence was replaced.
    """
    offset = content.find(original)
    matched = offset > -1
    while offset > -1:
        content[offset : offset + len(replacement)] = replacement
        offset = content.find(original)
    return matched


def rewrite_symlink_prefix(link_path: Path, operation: RewriteOperation) -> bool:
    """Point a symlink under the replacement prefix when it targets the original.

    The link is removed and recreated; a failure between the two steps
    leaves the link absent.

    Args:
        link_path: Symlink to inspect.
        operation: Prefix pair to apply.

    Returns:
        True when the link was recreated with a new target.
    """
    target = os.readlink(link_path)
    if not target.startswith(operation.original_prefix):
        return False
    relative_tail = os.path.relpath(target, operation.original_prefix)
    next_target = os.path.normpath(os.path.join(operation.replacement_prefix, relative_tail))
    if next_target == target:
        return False
    os.unlink(link_path)
    os.symlink(next_target, link_path)
    return True
