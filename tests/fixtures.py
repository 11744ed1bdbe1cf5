from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from tree_manifest.model import Summary

MIB = 1024 * 1024


def pattern_bytes(size: int, seed: int = 7) -> bytes:
    """Deterministic non-repeating-looking content of ``size`` bytes."""

    block = bytes((i * 31 + seed) % 251 for i in range(4096))
    reps, rest = divmod(size, len(block))
    return block * reps + block[:rest]


def make_file_dir_link_tree(root: Path) -> Path:
    """Root with a 2 MiB + 1 byte file, an empty dir and a relative symlink."""

    root.mkdir(parents=True, exist_ok=True)
    (root / "a.txt").write_bytes(pattern_bytes(2 * MIB + 1))
    (root / "b").mkdir()
    os.symlink("../target", root / "c")
    return root


def make_nested_tree(root: Path) -> Path:
    """Small mixed tree created in deliberately non-sorted order."""

    root.mkdir(parents=True, exist_ok=True)
    (root / "zeta").mkdir()
    (root / "alpha").mkdir()
    (root / "alpha" / "inner").mkdir()
    (root / "zeta" / "z.txt").write_text("zzz\n", encoding="utf-8")
    (root / "alpha" / "inner" / "deep.bin").write_bytes(b"\x00\x01\x02")
    (root / "alpha" / "b.txt").write_text("bbb\n", encoding="utf-8")
    (root / "alpha-beta.txt").write_text("dash\n", encoding="utf-8")
    (root / "empty.txt").write_bytes(b"")
    return root


@dataclass
class RecordingProgress:
    counts: list[tuple[int, int, int, int]] = field(default_factory=list)
    hashed: list[tuple[int, int]] = field(default_factory=list)
    finished: int = 0

    def counts_changed(self, summary: Summary) -> None:
        self.counts.append(
            (
                summary.found_dirs,
                summary.found_symlinks,
                summary.found_files,
                summary.files_total_size,
            )
        )

    def bytes_hashed(self, hashed: int, total: int) -> None:
        self.hashed.append((hashed, total))

    def finish(self) -> None:
        self.finished += 1
