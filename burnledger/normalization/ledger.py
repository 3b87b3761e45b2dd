"""Deduplicating merge of normalized transactions into the dataset."""

import logging
from typing import Iterable

from burnledger.models.dataset import AddressStats, Dataset
from burnledger.models.transaction import Transaction

logger = logging.getLogger(__name__)


def merge_batch(dataset: Dataset, transactions: Iterable[Transaction]) -> tuple[Dataset, int]:
    """Insert transactions whose hash is not yet stored.

    Known hashes are skipped, so merging the same batch twice is a no-op.
    Block bounds and per-address stats are updated for inserted records only.

    Returns:
        The same dataset instance and the number of transactions inserted.
    """
    added = 0
    metadata = dataset.metadata

    for tx in transactions:
        if dataset.contains(tx.hash):
            continue
        dataset.insert(tx)
        added += 1

        if metadata.oldest_block is None or tx.block_number < metadata.oldest_block:
            metadata.oldest_block = tx.block_number
        if metadata.newest_block is None or tx.block_number > metadata.newest_block:
            metadata.newest_block = tx.block_number

        dataset.address_stats.setdefault(tx.to, AddressStats()).record(tx)

    metadata.total_count = dataset.size
    if added:
        logger.debug("Merged %d new transactions (%d total)", added, dataset.size)
    return dataset, added
