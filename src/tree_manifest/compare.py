from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass, field
from typing import Any

from tree_manifest.config import load_settings, setup_logging
from tree_manifest.errors import ManifestError
from tree_manifest.evidence.hash_utils import first_divergent_chunk
from tree_manifest.evidence.stable_json import read_document, render_document
from tree_manifest.model import Options
from tree_manifest.progress import ProgressReporter
from tree_manifest.walker import walk

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ManifestDiff:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)
    # mtime changed while length and content did not.
    touched: list[str] = field(default_factory=list)
    # path -> index of the first 1 MiB chunk whose snapshot differs.
    divergent_chunks: dict[str, int] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not (self.added or self.removed or self.modified)


def _index_entries(document: dict[str, Any]) -> dict[str, dict[str, Any]]:
    index: dict[str, dict[str, Any]] = {}
    for i, entry in enumerate(document.get("entries") or []):
        if not isinstance(entry, dict) or not isinstance(entry.get("path"), str):
            raise ValueError(f"entries[{i}] must be an object with a string path")
        index[entry["path"]] = entry
    return index


def _divergent_chunk(old_hash: str, new_hash: str) -> int | None:
    try:
        return first_divergent_chunk(bytes.fromhex(old_hash), bytes.fromhex(new_hash))
    except ValueError:
        return None


def diff_documents(old: dict[str, Any], new: dict[str, Any]) -> ManifestDiff:
    """Compare two manifest documents path by path."""

    old_entries = _index_entries(old)
    new_entries = _index_entries(new)

    added = sorted(new_entries.keys() - old_entries.keys())
    removed = sorted(old_entries.keys() - new_entries.keys())
    modified: list[str] = []
    touched: list[str] = []
    divergent: dict[str, int] = {}

    for path in sorted(old_entries.keys() & new_entries.keys()):
        a = old_entries[path]
        b = new_entries[path]
        if a.get("kind") != b.get("kind"):
            modified.append(path)
        elif a.get("kind") == "symlink":
            if a.get("target") != b.get("target"):
                modified.append(path)
        elif a.get("kind") == "file":
            if a.get("len") != b.get("len") or a.get("hash") != b.get("hash"):
                modified.append(path)
                chunk = _divergent_chunk(str(a.get("hash", "")), str(b.get("hash", "")))
                if chunk is not None:
                    divergent[path] = chunk
            elif a.get("mtime") != b.get("mtime"):
                touched.append(path)

    return ManifestDiff(
        added=added,
        removed=removed,
        modified=modified,
        touched=touched,
        divergent_chunks=divergent,
    )


def verify_tree(
    document: dict[str, Any],
    reporter: ProgressReporter | None = None,
) -> ManifestDiff:
    """Re-scan the tree a manifest was taken from and diff it against the manifest."""

    base_dir = document.get("base_dir")
    if not isinstance(base_dir, str) or not base_dir:
        raise ValueError("manifest document has no base_dir")

    options = Options.build(base_dir, document.get("exclude_set") or [])
    model, summary = walk(options, reporter)
    current = render_document(options, summary, model, time.time_ns())
    return diff_documents(document, current)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tree-manifest-diff",
        description=(
            "Compare two tree manifests, or verify a live tree against a stored "
            "manifest when only one is given."
        ),
    )
    parser.add_argument("old", type=str, help="Reference manifest JSON")
    parser.add_argument(
        "new",
        type=str,
        nargs="?",
        default=None,
        help="Manifest to compare against (default: re-scan the reference base_dir)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    settings = load_settings()
    setup_logging(settings.log_level)

    try:
        old = read_document(args.old)
        if args.new is not None:
            diff = diff_documents(old, read_document(args.new))
        else:
            diff = verify_tree(old)
    except (OSError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2
    except ManifestError as exc:
        logger.error("%s", exc)
        return 2

    for path in diff.touched:
        print(f"WARN: mtime changed: {path}")

    if diff.ok:
        print("PASS: manifests match")
        return 0

    print("FAIL: manifests differ")
    for path in diff.added:
        print(f"- added: {path}")
    for path in diff.removed:
        print(f"- removed: {path}")
    for path in diff.modified:
        chunk = diff.divergent_chunks.get(path)
        suffix = "" if chunk is None else f" (first differing chunk: {chunk})"
        print(f"- modified: {path}{suffix}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
