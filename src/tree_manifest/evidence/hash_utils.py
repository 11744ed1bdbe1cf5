from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

import xxhash

CHUNK_SIZE = 1024 * 1024
SNAPSHOT_SIZE = 8
HASH_SEED = 0

ProgressCallback = Callable[[int, int], None]


def _read_chunk(stream: BinaryIO, buf: bytearray) -> int:
    """Fill ``buf`` from ``stream``; a short count only happens at EOF."""

    view = memoryview(buf)
    filled = 0
    while filled < len(buf):
        try:
            n = stream.readinto(view[filled:])
        except InterruptedError:
            continue
        if not n:
            break
        filled += n
    return filled


def hash_chain_stream(
    stream: BinaryIO,
    total: int,
    on_progress: ProgressCallback | None = None,
) -> bytes:
    """Fold ``stream`` chunk by chunk into a fresh xxh64 state.

    After every chunk the 64-bit state is appended little-endian, so the
    chain holds one 8-byte snapshot per 1 MiB chunk (the last one possibly
    partial) and is empty for empty content.
    """

    hasher = xxhash.xxh64(seed=HASH_SEED)
    chain = bytearray()
    buf = bytearray(CHUNK_SIZE)
    hashed = 0
    while True:
        n = _read_chunk(stream, buf)
        if n == 0:
            break
        hasher.update(memoryview(buf)[:n])
        chain += hasher.intdigest().to_bytes(SNAPSHOT_SIZE, "little")
        hashed += n
        if on_progress is not None:
            on_progress(hashed, total)
        if n < CHUNK_SIZE:
            break
    return bytes(chain)


def hash_chain(
    path: str | Path,
    on_progress: ProgressCallback | None = None,
    *,
    total: int | None = None,
) -> bytes:
    file_path = Path(path)
    with file_path.open("rb", buffering=0) as f:
        if total is None:
            total = file_path.stat().st_size
        return hash_chain_stream(f, total, on_progress)


def expected_snapshots(length: int) -> int:
    return -(-length // CHUNK_SIZE)


def chain_snapshots(chain: bytes) -> list[int]:
    if len(chain) % SNAPSHOT_SIZE:
        raise ValueError(f"hash chain length {len(chain)} is not a multiple of {SNAPSHOT_SIZE}")
    return [
        int.from_bytes(chain[i : i + SNAPSHOT_SIZE], "little")
        for i in range(0, len(chain), SNAPSHOT_SIZE)
    ]


def first_divergent_chunk(a: bytes, b: bytes) -> int | None:
    """Index of the first chunk whose snapshot differs, or None if the chains match.

    A chain that is a strict prefix of the other diverges at the first extra chunk.
    """

    left = chain_snapshots(a)
    right = chain_snapshots(b)
    for i, (x, y) in enumerate(zip(left, right)):
        if x != y:
            return i
    if len(left) != len(right):
        return min(len(left), len(right))
    return None


__all__ = [
    "CHUNK_SIZE",
    "HASH_SEED",
    "SNAPSHOT_SIZE",
    "chain_snapshots",
    "expected_snapshots",
    "first_divergent_chunk",
    "hash_chain",
    "hash_chain_stream",
]
