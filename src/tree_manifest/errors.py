from __future__ import annotations

from pathlib import Path


class ManifestError(Exception):
    """Base class for every failure surfaced by tree_manifest."""


class ConfigurationError(ManifestError):
    pass


class PatternError(ConfigurationError):
    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid exclude pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class EncodingError(ManifestError):
    pass


class InvalidPathEncoding(EncodingError):
    def __init__(self, path: str | Path) -> None:
        # repr() keeps undecodable bytes visible as escapes.
        super().__init__(f"path is not valid Unicode text: {str(path)!r}")
        self.path = path


class PathCollisionError(EncodingError):
    """Two directory entries map to the same NFC manifest path."""

    def __init__(self, first: str | Path, second: str | Path) -> None:
        super().__init__(
            f"paths collide after NFC normalization: {str(first)!r} and {str(second)!r}"
        )
        self.first = first
        self.second = second


class TraversalError(ManifestError):
    """An I/O failure that aborted a walk.

    Carries the offending path, the operation that failed (``read_dir``,
    ``file_type``, ``read_link``, ``metadata`` or ``read``) and the underlying
    ``OSError``.
    """

    def __init__(self, path: str | Path, operation: str, cause: OSError) -> None:
        super().__init__(f"{operation} failed for {str(path)!r}: {cause}")
        self.path = path
        self.operation = operation
        self.cause = cause


class SerializationError(ManifestError):
    pass


__all__ = [
    "ConfigurationError",
    "EncodingError",
    "InvalidPathEncoding",
    "ManifestError",
    "PathCollisionError",
    "PatternError",
    "SerializationError",
    "TraversalError",
]
