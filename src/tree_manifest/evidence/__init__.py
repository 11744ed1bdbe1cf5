"""Content fingerprints and the persisted manifest document.

`hash_utils` produces per-chunk hash chains; `stable_json` renders and writes
the deterministic JSON document.
"""

__all__ = [
    "hash_utils",
    "stable_json",
]
