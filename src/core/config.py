"""Runtime configuration model for Relstore.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from core.constants import (
    BIN_DIR_NAME,
    DEFAULT_CONCURRENCY,
    DEFAULT_RUNTIME_PACKAGE_NAME,
    DEFAULT_RUNTIME_VERSION,
    EXPORT_DIR_NAME,
    MAX_SHEBANG_LENGTH,
    RUNTIME_BINARY_PATH,
    RUNTIME_HASH_PLACEHOLDER,
    SHEBANG_PREFIX,
    STORE_INSTALL_TREE,
    STORE_VERSION,
)
from core.errors import RelstoreConfigError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class RelstoreConfig:
    """Validated runtime configuration.

    Attributes:
        release_path: Release package root holding ``_export`` and ``bin``.
        runtime_package_name: Package name of the language runtime.
        runtime_version: Version string of the language runtime.
        rewrite_prefix: Whether store paths are padded and relocated.
        concurrency: Maximum in-flight filesystem tasks per fan-out.
    """

    release_path: Path
    runtime_package_name: str
    runtime_version: str
    rewrite_prefix: bool
    concurrency: int

    @classmethod
    def from_env(cls, release_path: str | Path | None = None) -> "RelstoreConfig":
        """Build config from process environment variables.

        Args:
            release_path: Optional release root; defaults to the working directory.

        Returns:
            A validated config object.

        Raises:
            RelstoreConfigError: If environment values are invalid.
        """
        runtime_package_name = _read_with_fallback("OCAML_PKG_NAME", DEFAULT_RUNTIME_PACKAGE_NAME)
        runtime_version = _read_with_fallback("OCAML_VERSION", DEFAULT_RUNTIME_VERSION)
        rewrite_prefix = os.getenv("ESY_RELEASE_REWRITE_PREFIX") == "true"
        concurrency = _parse_concurrency(
            os.getenv("RELSTORE_CONCURRENCY", str(DEFAULT_CONCURRENCY))
        )
        if release_path is None:
            resolved_release_path = Path(os.getcwd())
        else:
            resolved_release_path = Path(release_path).expanduser().resolve()
        return cls(
            release_path=resolved_release_path,
            runtime_package_name=runtime_package_name,
            runtime_version=runtime_version,
            rewrite_prefix=rewrite_prefix,
            concurrency=concurrency,
        )

    @property
    def runtime_store_path(self) -> str:
        """Install-tree relative path of the runtime interpreter binary."""
        return (
            f"{self.runtime_package_name}-{self.runtime_version}-"
            f"{RUNTIME_HASH_PLACEHOLDER}/{RUNTIME_BINARY_PATH}"
        )

    @property
    def padding_length(self) -> int:
        """Fixed byte length every padded store path is extended to."""
        runtime_suffix = f"/{STORE_INSTALL_TREE}/{self.runtime_store_path}"
        return MAX_SHEBANG_LENGTH - len(SHEBANG_PREFIX) - len(runtime_suffix.encode("utf-8"))

    @property
    def export_path(self) -> Path:
        return self.release_path / EXPORT_DIR_NAME

    @property
    def bin_path(self) -> Path:
        return self.release_path / BIN_DIR_NAME

    @property
    def unpadded_store_path(self) -> Path:
        return self.release_path / str(STORE_VERSION)


def _read_with_fallback(name: str, default: str) -> str:
    """Read an environment value, warning when the default is used.

    Args:
        name: Environment variable name.
        default: Value used when the variable is absent or empty.

    Returns:
        Environment value or default.
    """
    value = os.getenv(name)
    if value:
        return value
    _LOGGER.warning(
        "runtime_env_fallback",
        variable=name,
        default=default,
        detail="store padding may not match the exported builds",
    )
    return default


def _parse_concurrency(raw_value: str) -> int:
    """Parse the concurrency limit environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive integer.

    Raises:
        RelstoreConfigError: If value is not a positive integer.
    """
    try:
        concurrency = int(raw_value)
    except ValueError as error:
        raise RelstoreConfigError(
            "Invalid RELSTORE_CONCURRENCY value: "
            f"expected integer, got '{raw_value}'. "
            "Set RELSTORE_CONCURRENCY to a positive number."
        ) from error
    if concurrency < 1:
        raise RelstoreConfigError(
            f"Invalid RELSTORE_CONCURRENCY value: expected at least 1, got {concurrency}."
        )
    return concurrency
