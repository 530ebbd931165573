"""Path relocation layer.

This module walks extracted trees and rewrites embedded store prefixes.
It also re-signs binaries whose bytes were changed by relocation.
"""
