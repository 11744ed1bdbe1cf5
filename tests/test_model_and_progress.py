from __future__ import annotations

import io
from pathlib import Path

import pytest

from tree_manifest.errors import PatternError
from tree_manifest.model import DirEntry, FileEntry, ManifestModel, Options, Summary, SymlinkEntry
from tree_manifest.progress import NullProgress, StatusLineProgress


def test_model_sorts_component_wise_on_freeze() -> None:
    model = ManifestModel()
    for path in ["zeta", "a-b", "a/b", "a"]:
        model.insert(path, DirEntry())

    assert model.paths() == ["zeta", "a-b", "a/b", "a"]
    model.freeze()
    assert model.paths() == ["a", "a/b", "a-b", "zeta"]


def test_model_rejects_duplicates_and_late_inserts() -> None:
    model = ManifestModel()
    model.insert("x", SymlinkEntry(target="y"))
    with pytest.raises(ValueError):
        model.insert("x", DirEntry())

    model.freeze()
    with pytest.raises(RuntimeError):
        model.insert("z", DirEntry())


def test_files_iterates_only_file_entries() -> None:
    model = ManifestModel()
    model.insert("d", DirEntry())
    model.insert("d/f", FileEntry(len=3, mtime_ns=0, hash_chain=b"\x00" * 8))
    model.freeze()

    assert [p for p, _ in model.files()] == ["d/f"]
    assert "d" in model
    assert len(model) == 2


def test_options_are_built_once_and_immutable(tmp_path: Path) -> None:
    options = Options.build(tmp_path / "rel" / ".." / "root", ["*.tmp", "*.tmp"])

    assert options.base_dir.is_absolute()
    assert options.base_dir == tmp_path / "root"
    assert options.exclude_patterns == frozenset({"*.tmp"})
    assert options.matcher.patterns == options.exclude_patterns
    with pytest.raises(AttributeError):
        options.exclude_patterns = frozenset()  # type: ignore[misc]


def test_options_reject_bad_patterns(tmp_path: Path) -> None:
    with pytest.raises(PatternError):
        Options.build(tmp_path, ["[oops"])


def test_summary_total() -> None:
    assert Summary(found_dirs=2, found_symlinks=1, found_files=4).found_total == 7


def test_status_line_renders_counts_and_hashing() -> None:
    stream = io.StringIO()
    progress = StatusLineProgress(stream)

    progress.counts_changed(Summary(found_dirs=3, found_symlinks=1, found_files=12))
    progress.bytes_hashed(512 * 1024, 1024 * 1024)
    progress.finish()

    text = stream.getvalue()
    assert text.startswith("\r     3 dirs,      1 symlinks,     12 files found")
    assert "; hashing...  50.0%    0.500/   1.000 MiB" in text
    assert text.endswith("\n")


def test_status_line_stays_silent_without_events() -> None:
    stream = io.StringIO()
    StatusLineProgress(stream).finish()
    assert stream.getvalue() == ""


def test_null_progress_accepts_everything() -> None:
    progress = NullProgress()
    progress.counts_changed(Summary())
    progress.bytes_hashed(1, 1)
    progress.finish()
