from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TextIO

from tree_manifest.errors import SerializationError
from tree_manifest.model import (
    DirEntry,
    FileEntry,
    ManifestEntry,
    ManifestModel,
    Options,
    Summary,
    SymlinkEntry,
)

NANOS_PER_SECOND = 1_000_000_000


def format_timestamp_ns(ns: int) -> str:
    """RFC 3339 UTC timestamp; sub-second digits (3, 6 or 9) only when non-zero."""

    seconds, frac = divmod(ns, NANOS_PER_SECOND)
    base = datetime.fromtimestamp(seconds, UTC).strftime("%Y-%m-%dT%H:%M:%S")
    if frac == 0:
        return base + "Z"
    if frac % 1_000_000 == 0:
        return f"{base}.{frac // 1_000_000:03d}Z"
    if frac % 1_000 == 0:
        return f"{base}.{frac // 1_000:06d}Z"
    return f"{base}.{frac:09d}Z"


def _text(value: str, what: str) -> str:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise SerializationError(f"{what} is not valid Unicode text: {value!r}") from exc
    return value


def render_entry(rel_path: str, entry: ManifestEntry) -> dict[str, Any]:
    item: dict[str, Any] = {"path": _text(rel_path, "path"), "kind": entry.kind}
    if isinstance(entry, SymlinkEntry):
        item["target"] = _text(entry.target, f"symlink target of {rel_path!r}")
    elif isinstance(entry, FileEntry):
        item["len"] = entry.len
        item["mtime"] = format_timestamp_ns(entry.mtime_ns)
        item["hash"] = entry.hash_chain.hex()
    elif not isinstance(entry, DirEntry):
        raise SerializationError(f"unknown manifest entry for {rel_path!r}: {entry!r}")
    return item


def render_document(
    options: Options,
    summary: Summary,
    model: ManifestModel,
    timestamp_ns: int,
) -> dict[str, Any]:
    """Build the persisted manifest document; entries keep the model's path order."""

    if not model.frozen:
        raise SerializationError("manifest model must be frozen before rendering")

    return {
        "timestamp": format_timestamp_ns(timestamp_ns),
        "base_dir": _text(str(options.base_dir), "base_dir"),
        "exclude_set": sorted(options.exclude_patterns),
        "found_dirs": summary.found_dirs,
        "found_symlinks": summary.found_symlinks,
        "found_files": summary.found_files,
        "files_total_size": summary.files_total_size,
        "entries": [render_entry(rel_path, entry) for rel_path, entry in model.items()],
    }


def dumps_document(data: Any, *, indent: int = 2) -> str:
    try:
        return json.dumps(data, indent=indent, sort_keys=True, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"cannot encode manifest document: {exc}") from exc


def write_document(stream: TextIO, data: Any) -> None:
    stream.write(dumps_document(data))
    stream.flush()


def read_json(path: str | Path) -> Any:
    """Read JSON from disk (UTF-8) and parse."""

    p = Path(path)
    return json.loads(p.read_text(encoding="utf-8"))


def write_json(path: str | Path, data: Any, *, make_parents: bool = False) -> None:
    """Write JSON deterministically (UTF-8, LF newlines, trailing newline)."""

    p = Path(path)
    if make_parents:
        p.parent.mkdir(parents=True, exist_ok=True)

    p.write_text(dumps_document(data), encoding="utf-8", newline="\n")


def read_document(path: str | Path) -> dict[str, Any]:
    data = read_json(path)
    if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
        raise ValueError(f"not a tree manifest document: {path}")
    return data


__all__ = [
    "dumps_document",
    "format_timestamp_ns",
    "read_document",
    "read_json",
    "render_document",
    "render_entry",
    "write_document",
    "write_json",
]
