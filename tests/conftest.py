"""Pytest configuration for repository test runs."""

from __future__ import annotations

import shutil
import sys
import tempfile
from pathlib import Path
from typing import Iterator

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def release_root() -> Iterator[Path]:
    """Short-lived release directory with a path short enough to pad."""
    root = Path(tempfile.mkdtemp(prefix="rs-", dir="/tmp")).resolve()
    yield root
    shutil.rmtree(root, ignore_errors=True)
