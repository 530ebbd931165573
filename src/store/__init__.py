"""Store layout and build import layer.

This module derives padded store roots, creates the store trees,
and publishes extracted builds into the install tree.
"""
