"""Unit tests for CLI command handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from cli.main import main
from tests.archive_fixtures import (
    padded_old_prefix,
    release_config,
    write_bin_wrappers,
    write_build_archive,
)


@pytest.fixture(autouse=True)
def _runtime_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OCAML_PKG_NAME", "ocaml")
    monkeypatch.setenv("OCAML_VERSION", "4.14.0")
    monkeypatch.setenv("ESY_RELEASE_REWRITE_PREFIX", "true")
    monkeypatch.setattr("install.release_installer.requires_resigning", lambda: False)


def test_cli_install_prints_done(release_root: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """CLI install should import builds and report completion."""
    config = release_config(release_root)
    old_prefix = padded_old_prefix(config)
    write_build_archive(config.export_path, "abc123", {"README": b"doc"}, old_prefix)
    write_bin_wrappers(release_root, old_prefix, {})

    exit_code = main(["--release-path", str(release_root), "install"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0 and output == "Done!"


def test_cli_install_reports_already_installed(
    release_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config = release_config(release_root)
    config.export_path.mkdir()
    main(["--release-path", str(release_root), "store-path"])
    store_path = capsys.readouterr().out.strip()
    Path(store_path).mkdir()

    exit_code = main(["--release-path", str(release_root), "install"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0 and output == "Release already installed, exiting..."


def test_cli_install_fails_without_builds(
    release_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Missing export directory should exit non-zero with one error line."""
    exit_code = main(["--release-path", str(release_root), "install"])
    error_output = capsys.readouterr().err

    assert exit_code == 1 and "error: no builds found" in error_output


def test_cli_store_path_prints_padded_path(
    release_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(["--release-path", str(release_root), "store-path"])
    output = capsys.readouterr().out.strip()

    assert exit_code == 0 and len(output) == release_config(release_root).padding_length


def test_cli_store_path_fails_for_deep_release(
    release_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    deep_root = release_root / ("d" * 100)
    deep_root.mkdir()

    exit_code = main(["--release-path", str(deep_root), "store-path"])

    assert exit_code == 1 and "too deep" in capsys.readouterr().err


def test_cli_rejects_zero_concurrency(
    release_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exit_code = main(["--release-path", str(release_root), "--concurrency", "0", "store-path"])

    assert exit_code == 1 and "--concurrency" in capsys.readouterr().err


def test_cli_install_reports_undecodable_stash_record(
    release_root: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """A stash record that is not UTF-8 should exit non-zero with one error line."""
    config = release_config(release_root)
    write_build_archive(
        config.export_path, "bad", {"_esy/storePrefix": b"\xff" * 10}, store_prefix=None
    )
    write_bin_wrappers(release_root, padded_old_prefix(config), {})

    exit_code = main(["--release-path", str(release_root), "install"])
    error_output = capsys.readouterr().err

    assert exit_code == 1 and "error: Build at" in error_output
