from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from tree_manifest.exclude import ExcludeMatcher
from tree_manifest.paths import absolute_root, path_sort_key


@dataclass(frozen=True, slots=True)
class Options:
    base_dir: Path
    exclude_patterns: frozenset[str]
    matcher: ExcludeMatcher

    @classmethod
    def build(cls, base_dir: str | Path, exclude_patterns: Iterable[str] = ()) -> Options:
        """Compile the exclude set once; raises PatternError before any walk starts."""

        matcher = ExcludeMatcher.compile(exclude_patterns)
        return cls(
            base_dir=absolute_root(base_dir),
            exclude_patterns=matcher.patterns,
            matcher=matcher,
        )


@dataclass(slots=True)
class Summary:
    found_dirs: int = 0
    found_symlinks: int = 0
    found_files: int = 0
    files_total_size: int = 0

    @property
    def found_total(self) -> int:
        return self.found_dirs + self.found_symlinks + self.found_files


@dataclass(frozen=True, slots=True)
class DirEntry:
    kind: ClassVar[str] = "dir"


@dataclass(frozen=True, slots=True)
class SymlinkEntry:
    kind: ClassVar[str] = "symlink"

    target: str


@dataclass(frozen=True, slots=True)
class FileEntry:
    kind: ClassVar[str] = "file"

    len: int
    mtime_ns: int
    hash_chain: bytes


ManifestEntry = DirEntry | SymlinkEntry | FileEntry


class ManifestModel:
    """Path -> entry mapping filled during one walk, then frozen.

    Insertion order follows discovery; iteration after ``freeze()`` is by
    path, compared component-wise.
    """

    def __init__(self) -> None:
        self._entries: dict[str, ManifestEntry] = {}
        self._frozen = False

    def insert(self, rel_path: str, entry: ManifestEntry) -> None:
        if self._frozen:
            raise RuntimeError("manifest model is frozen")
        if rel_path in self._entries:
            raise ValueError(f"duplicate manifest path: {rel_path!r}")
        self._entries[rel_path] = entry

    def freeze(self) -> None:
        if self._frozen:
            return
        ordered = sorted(self._entries.items(), key=lambda kv: path_sort_key(kv[0]))
        self._entries = dict(ordered)
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, rel_path: object) -> bool:
        return rel_path in self._entries

    def __getitem__(self, rel_path: str) -> ManifestEntry:
        return self._entries[rel_path]

    def items(self) -> Iterator[tuple[str, ManifestEntry]]:
        return iter(self._entries.items())

    def paths(self) -> list[str]:
        return list(self._entries)

    def files(self) -> Iterator[tuple[str, FileEntry]]:
        for rel_path, entry in self._entries.items():
            if isinstance(entry, FileEntry):
                yield rel_path, entry


__all__ = [
    "DirEntry",
    "FileEntry",
    "ManifestEntry",
    "ManifestModel",
    "Options",
    "Summary",
    "SymlinkEntry",
]
