"""Relstore CLI entry points.
This module exposes the release install and store path commands.
It maps argparse commands onto SDK calls and process exit codes.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Any, Sequence

from core.config import RelstoreConfig
from core.errors import RelstoreConfigError, RelstoreError
from core.types import InstallResult, InstallStatus
from install.release_installer import install_release
from store.store_path import store_path_for_config


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="relstore",
        description="Install exported builds into a relocatable store",
    )
    parser.add_argument(
        "--release-path",
        help="Release package root (defaults to the current directory)",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        help="Override RELSTORE_CONCURRENCY for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_install_command(subparsers)
    _add_store_path_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Relstore CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args.release_path, args.concurrency)
        if args.command == "install":
            return _run_install_command(config)
        if args.command == "store-path":
            return _run_store_path_command(config)
    except (RelstoreError, OSError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(release_path: str | None, concurrency: int | None) -> RelstoreConfig:
    """Build runtime config with optional CLI overrides.

    Args:
        release_path: Optional release root override.
        concurrency: Optional concurrency override.

    Returns:
        Validated runtime config.

    Raises:
        RelstoreConfigError: If the concurrency override is not positive.
    """
    config = RelstoreConfig.from_env(release_path)
    if concurrency is not None:
        if concurrency < 1:
            raise RelstoreConfigError(f"--concurrency must be at least 1, got {concurrency}")
        config = replace(config, concurrency=concurrency)
    return config


def _run_install_command(config: RelstoreConfig) -> int:
    """Handle install command.

    Args:
        config: Runtime config.

    Returns:
        Exit code.
    """
    result = install_release(config)
    if result.status is InstallStatus.ALREADY_INSTALLED:
        print("Release already installed, exiting...")
        return 0
    print("Done!")
    _print_signing_summary(result)
    return 0


def _run_store_path_command(config: RelstoreConfig) -> int:
    """Handle store-path command."""
    print(store_path_for_config(config))
    return 0


def _print_signing_summary(result: InstallResult) -> None:
    if result.signing is None:
        return
    print("Detected macOS arm64. Signing binaries...")
    for path, message in result.signing.failed.items():
        print(f"warning: could not sign {path}: {message}")
    print(f"signed={len(result.signing.signed)} failed={result.signing.failed_count}")
    print("Done!")


def _add_install_command(subparsers: Any) -> None:
    """Register install subcommand."""
    subparsers.add_parser(
        "install",
        help="Import exported builds into the store and relocate paths",
    )


def _add_store_path_command(subparsers: Any) -> None:
    """Register store-path subcommand."""
    subparsers.add_parser(
        "store-path",
        help="Print the padded store path for the release root",
    )
