"""Core constants used across Relstore modules.

This module centralizes store layout names and relocation limits.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

STORE_VERSION = 3
STORE_BUILD_TREE = "b"
STORE_INSTALL_TREE = "i"
STORE_STAGE_TREE = "s"
STORE_PADDING_CHAR = "_"
MAX_SHEBANG_LENGTH = 127
SHEBANG_PREFIX = "#!"
DEFAULT_RUNTIME_PACKAGE_NAME = "ocaml"
DEFAULT_RUNTIME_VERSION = "n.00.0000"
RUNTIME_HASH_PLACEHOLDER = "########"
RUNTIME_BINARY_PATH = "bin/ocamlrun"
EXPORT_DIR_NAME = "_export"
BIN_DIR_NAME = "bin"
BIN_STORE_PATH_FILE_NAME = "_storePath"
BUILD_STORE_PREFIX_FILE = ("_esy", "storePrefix")
ARCHIVE_SUFFIX = ".tar.gz"
DEFAULT_CONCURRENCY = 20
OWNER_WRITE_BIT = 0o200
MACHO_MAGIC_64 = 0xFEEDFACF
CODESIGN_COMMAND = (
    "codesign",
    "--sign",
    "-",
    "--force",
    "--preserve-metadata=entitlements,requirements,flags,runtime",
)
SIGNING_WORKAROUND_DIR_PREFIX = "esy-npm-bigsur-workaround-"
