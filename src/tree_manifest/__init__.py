"""Deterministic manifests of local directory trees.

A manifest lists every directory, symbolic link and regular file under a root,
with per-chunk hash chains for files, and is used to detect drift between two
scans of the same tree.
"""

__version__ = "0.1.0"

__all__: list[str] = [
    "cli",
    "compare",
    "config",
    "errors",
    "evidence",
    "exclude",
    "model",
    "paths",
    "progress",
    "walker",
]
