"""Depth-first directory traversal that fills a ManifestModel.

Directories are descended in pre-order (a sub-directory is visited before
its later siblings) using an explicit stack of directory listings, so tree
depth is not limited by the interpreter's recursion limit. Symbolic links are
recorded, never followed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from tree_manifest.errors import PathCollisionError, TraversalError
from tree_manifest.evidence.hash_utils import hash_chain
from tree_manifest.model import DirEntry, FileEntry, ManifestModel, Options, Summary, SymlinkEntry
from tree_manifest.paths import relative_path
from tree_manifest.progress import NullProgress, ProgressReporter

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Listing:
    path: str
    entries: list[os.DirEntry[str]]
    cursor: int = field(default=0)


def _list_dir(path: str) -> list[os.DirEntry[str]]:
    # Read the whole listing so the directory handle is closed before descending.
    try:
        with os.scandir(path) as it:
            return list(it)
    except OSError as exc:
        raise TraversalError(path, "read_dir", exc) from exc


class TreeWalker:
    def __init__(
        self,
        options: Options,
        model: ManifestModel,
        summary: Summary,
        reporter: ProgressReporter | None = None,
    ) -> None:
        self.options = options
        self.model = model
        self.summary = summary
        self.reporter: ProgressReporter = reporter if reporter is not None else NullProgress()
        self._root = str(options.base_dir)
        # Normalized path -> raw path it was first seen under.
        self._sources: dict[str, str] = {}

    def run(self) -> None:
        logger.info(
            "Scanning %s (%d exclude patterns)", self._root, len(self.options.exclude_patterns)
        )
        stack = [_Listing(self._root, _list_dir(self._root))]
        while stack:
            listing = stack[-1]
            if listing.cursor >= len(listing.entries):
                stack.pop()
                continue
            entry = listing.entries[listing.cursor]
            listing.cursor += 1
            if self._visit(entry):
                stack.append(_Listing(entry.path, _list_dir(entry.path)))

        self.model.freeze()
        logger.info(
            "Scan complete: %d dirs, %d symlinks, %d files, %d bytes",
            self.summary.found_dirs,
            self.summary.found_symlinks,
            self.summary.found_files,
            self.summary.files_total_size,
        )

    def _visit(self, entry: os.DirEntry[str]) -> bool:
        """Record one entry; return True when it is a directory to descend into."""

        rel = relative_path(entry.path, self._root)
        if self.options.matcher.matches(rel):
            return False
        first = self._sources.setdefault(rel, entry.path)
        if first != entry.path:
            raise PathCollisionError(first, entry.path)

        try:
            is_link = entry.is_symlink()
            is_dir = entry.is_dir(follow_symlinks=False)
            is_file = entry.is_file(follow_symlinks=False)
        except OSError as exc:
            raise TraversalError(entry.path, "file_type", exc) from exc

        if is_dir:
            self.model.insert(rel, DirEntry())
            self.summary.found_dirs += 1
            self.reporter.counts_changed(self.summary)
            return True

        if is_link:
            try:
                target = os.readlink(entry.path)
            except OSError as exc:
                raise TraversalError(entry.path, "read_link", exc) from exc
            self.model.insert(rel, SymlinkEntry(target=target))
            self.summary.found_symlinks += 1
            self.reporter.counts_changed(self.summary)
            return False

        if is_file:
            self._visit_file(entry, rel)
            return False

        logger.debug("Skipping unsupported entry type: %s", entry.path)
        return False

    def _visit_file(self, entry: os.DirEntry[str], rel: str) -> None:
        try:
            st = entry.stat(follow_symlinks=False)
        except OSError as exc:
            raise TraversalError(entry.path, "metadata", exc) from exc

        try:
            chain = hash_chain(entry.path, self.reporter.bytes_hashed, total=st.st_size)
        except OSError as exc:
            raise TraversalError(entry.path, "read", exc) from exc

        self.model.insert(rel, FileEntry(len=st.st_size, mtime_ns=st.st_mtime_ns, hash_chain=chain))
        self.summary.found_files += 1
        self.summary.files_total_size += st.st_size
        self.reporter.counts_changed(self.summary)


def walk(
    options: Options, reporter: ProgressReporter | None = None
) -> tuple[ManifestModel, Summary]:
    """Scan ``options.base_dir`` and return the frozen model with its summary.

    Any error aborts the whole walk; no partial model is returned.
    """

    model = ManifestModel()
    summary = Summary()
    TreeWalker(options, model, summary, reporter).run()
    return model, summary


__all__ = ["TreeWalker", "walk"]
