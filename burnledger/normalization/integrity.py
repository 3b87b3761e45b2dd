"""Deterministic digest over a dataset's transaction-hash set."""

import zlib

from burnledger.models.dataset import Dataset


def compute_hash(dataset: Dataset) -> str:
    """CRC-32 of the sorted, ``|``-joined transaction keys as 8 hex digits.

    Independent of insertion order. Detects drift between validation runs; it
    is not a security primitive.
    """
    joined = "|".join(sorted(dataset.transactions))
    return f"{zlib.crc32(joined.encode('utf-8')):08x}"
