"""Unit tests for core config parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.config import RelstoreConfig
from core.errors import RelstoreConfigError


def test_from_env_uses_runtime_fallbacks(monkeypatch: pytest.MonkeyPatch) -> None:
    """Missing runtime variables should fall back to documented defaults."""
    monkeypatch.delenv("OCAML_PKG_NAME", raising=False)
    monkeypatch.delenv("OCAML_VERSION", raising=False)

    config = RelstoreConfig.from_env()

    assert (config.runtime_package_name, config.runtime_version) == ("ocaml", "n.00.0000")


def test_from_env_treats_empty_package_name_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    """An empty package name should not produce an empty runtime path."""
    monkeypatch.setenv("OCAML_PKG_NAME", "")

    config = RelstoreConfig.from_env()

    assert config.runtime_package_name == "ocaml"


def test_from_env_reads_runtime_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Runtime name and version should come from the environment."""
    monkeypatch.setenv("OCAML_PKG_NAME", "ocaml-variant")
    monkeypatch.setenv("OCAML_VERSION", "4.14.1000")

    config = RelstoreConfig.from_env()

    assert config.runtime_store_path == "ocaml-variant-4.14.1000-########/bin/ocamlrun"


def test_rewrite_prefix_requires_literal_true(monkeypatch: pytest.MonkeyPatch) -> None:
    """Only the exact string true should enable relocation."""
    monkeypatch.setenv("ESY_RELEASE_REWRITE_PREFIX", "1")

    config = RelstoreConfig.from_env()

    assert config.rewrite_prefix is False


def test_rewrite_prefix_enabled(monkeypatch: pytest.MonkeyPatch) -> None:
    """ESY_RELEASE_REWRITE_PREFIX=true should enable relocation."""
    monkeypatch.setenv("ESY_RELEASE_REWRITE_PREFIX", "true")

    config = RelstoreConfig.from_env()

    assert config.rewrite_prefix is True


def test_padding_length_for_default_runtime(monkeypatch: pytest.MonkeyPatch) -> None:
    """Default runtime placeholder should leave 85 bytes for the store path."""
    monkeypatch.delenv("OCAML_PKG_NAME", raising=False)
    monkeypatch.delenv("OCAML_VERSION", raising=False)

    config = RelstoreConfig.from_env()

    assert config.padding_length == 85


def test_release_path_defaults_to_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Release root should be the current directory unless overridden."""
    monkeypatch.chdir(tmp_path)

    config = RelstoreConfig.from_env()

    assert config.export_path == tmp_path.resolve() / "_export"


def test_from_env_raises_for_invalid_concurrency(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-numeric concurrency."""
    monkeypatch.setenv("RELSTORE_CONCURRENCY", "many")

    with pytest.raises(RelstoreConfigError):
        RelstoreConfig.from_env()


def test_from_env_raises_for_zero_concurrency(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail when concurrency would block all work."""
    monkeypatch.setenv("RELSTORE_CONCURRENCY", "0")

    with pytest.raises(RelstoreConfigError):
        RelstoreConfig.from_env()
