from __future__ import annotations

import os
import unicodedata
from pathlib import Path, PurePath

from tree_manifest.errors import InvalidPathEncoding


def _require_unicode(text: str, original: str | os.PathLike[str]) -> None:
    # os.fsdecode maps undecodable bytes to lone surrogates, which refuse to encode.
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidPathEncoding(os.fspath(original)) from None


def relative_path(path: str | os.PathLike[str], root: str | os.PathLike[str]) -> str:
    """Strip ``root`` from ``path`` and return the NFC-normalized POSIX form.

    Raises ``ValueError`` when ``path`` is not below ``root`` and
    ``InvalidPathEncoding`` when the remainder is not valid Unicode.
    """

    rel = PurePath(os.fspath(path)).relative_to(PurePath(os.fspath(root)))
    text = rel.as_posix()
    _require_unicode(text, path)
    return unicodedata.normalize("NFC", text)


def path_sort_key(rel_path: str) -> tuple[str, ...]:
    """Component-wise ordering key, so ``a/b`` sorts before ``a-b``."""

    return tuple(rel_path.split("/"))


def absolute_root(root: str | os.PathLike[str]) -> Path:
    return Path(os.path.abspath(os.fspath(root)))


__all__ = [
    "absolute_root",
    "path_sort_key",
    "relative_path",
]
