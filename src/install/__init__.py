"""Release installation layer.

This module drives store setup, build import, wrapper relocation,
and binary re-signing for one exported release.
"""
