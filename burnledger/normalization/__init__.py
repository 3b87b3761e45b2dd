"""Normalization, deduplicating merge and integrity hashing."""

from burnledger.normalization.integrity import compute_hash
from burnledger.normalization.ledger import merge_batch
from burnledger.normalization.transactions import TransactionNormalizer

__all__ = ["TransactionNormalizer", "compute_hash", "merge_batch"]
