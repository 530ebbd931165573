"""Relstore exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class RelstoreError(Exception):
    """Base exception for all Relstore failures."""


class RelstoreConfigError(RelstoreError):
    """Raised for invalid runtime configuration or release layout."""


class RelstoreStoreError(RelstoreError):
    """Raised for store layout initialization failures."""


class RelstoreImportError(RelstoreError):
    """Raised when one build archive cannot be imported."""


class RelstoreRewriteError(RelstoreError):
    """Raised for invalid or impossible path prefix rewrites."""


class RelstoreSigningError(RelstoreError):
    """Raised when re-signing one binary fails."""
