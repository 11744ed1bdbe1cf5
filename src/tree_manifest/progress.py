from __future__ import annotations

from typing import Protocol, TextIO

from tree_manifest.model import Summary

MIB = 1024.0 * 1024.0


class ProgressReporter(Protocol):
    def counts_changed(self, summary: Summary) -> None: ...

    def bytes_hashed(self, hashed: int, total: int) -> None: ...

    def finish(self) -> None: ...


class NullProgress:
    def counts_changed(self, summary: Summary) -> None:
        pass

    def bytes_hashed(self, hashed: int, total: int) -> None:
        pass

    def finish(self) -> None:
        pass


class StatusLineProgress:
    """Single carriage-return status line on a text stream (normally stderr)."""

    # Width of the hashing suffix, used to blank it once a file is done.
    _HASH_SUFFIX_WIDTH = 42

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._summary = Summary()
        self._wrote = False

    def _counts(self) -> str:
        s = self._summary
        return (
            f"\r{s.found_dirs:>6} dirs, {s.found_symlinks:>6} symlinks, "
            f"{s.found_files:>6} files found"
        )

    def counts_changed(self, summary: Summary) -> None:
        self._summary = summary
        self._stream.write(self._counts() + " " * self._HASH_SUFFIX_WIDTH)
        self._stream.flush()
        self._wrote = True

    def bytes_hashed(self, hashed: int, total: int) -> None:
        pct = 100.0 * hashed / total if total else 100.0
        self._stream.write(
            self._counts()
            + f"; hashing... {pct:>5.1f}% {hashed / MIB:>8.3f}/{total / MIB:>8.3f} MiB"
        )
        self._stream.flush()
        self._wrote = True

    def finish(self) -> None:
        if self._wrote:
            self._stream.write("\n")
            self._stream.flush()


__all__ = ["NullProgress", "ProgressReporter", "StatusLineProgress"]
