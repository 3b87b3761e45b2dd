"""Tests for the deduplicating merge."""

import pytest

from burnledger.constants import SINK_ADDRESSES
from burnledger.exceptions import DuplicateKeyError
from burnledger.models.dataset import Dataset
from burnledger.normalization.ledger import merge_batch

BA1 = SINK_ADDRESSES["BA-1"]
BA2 = SINK_ADDRESSES["BA-2"]


class TestMergeBatch:
    def test_overlapping_batches(self, make_tx):
        """{tx1, tx2} then {tx2, tx3} yields three transactions, one added by the second batch."""
        dataset = Dataset()
        dataset, added_first = merge_batch(dataset, [make_tx("0x1"), make_tx("0x2")])
        dataset, added_second = merge_batch(dataset, [make_tx("0x2"), make_tx("0x3")])

        assert added_first == 2
        assert added_second == 1
        assert set(dataset.transactions) == {"0x1", "0x2", "0x3"}
        assert dataset.metadata.total_count == 3

    def test_idempotent(self, make_tx):
        batch = [make_tx("0x1"), make_tx("0x2")]
        dataset, _ = merge_batch(Dataset(), batch)
        before = dataset.model_dump()

        dataset, added = merge_batch(dataset, batch)

        assert added == 0
        assert dataset.model_dump() == before

    def test_duplicates_within_batch(self, make_tx):
        dataset, added = merge_batch(Dataset(), [make_tx("0x1"), make_tx("0x1")])
        assert added == 1
        assert dataset.size == 1

    def test_cross_source_dedup(self, make_tx):
        """The same transfer reported while querying two sink addresses is stored once."""
        seen_via_ba1 = make_tx("0x1", to=BA2)
        seen_via_ba2 = make_tx("0x1", to=BA2)
        dataset, _ = merge_batch(Dataset(), [seen_via_ba1])
        dataset, added = merge_batch(dataset, [seen_via_ba2])

        assert added == 0
        assert dataset.address_stats[BA2].count == 1

    def test_first_copy_wins(self, make_tx):
        dataset, _ = merge_batch(Dataset(), [make_tx("0x1", raw_amount="5")])
        dataset, _ = merge_batch(dataset, [make_tx("0x1", raw_amount="7")])
        assert dataset.transactions["0x1"].raw_amount == "5"

    def test_block_bounds(self, make_tx):
        dataset, _ = merge_batch(
            Dataset(), [make_tx("0x1", block=50), make_tx("0x2", block=10), make_tx("0x3", block=30)]
        )
        assert dataset.metadata.oldest_block == 10
        assert dataset.metadata.newest_block == 50

    def test_address_stats(self, make_tx):
        dataset, _ = merge_batch(
            Dataset(),
            [
                make_tx("0x1", to=BA1, raw_amount="100", timestamp=1_650_000_000),
                make_tx("0x2", to=BA1, raw_amount="250", timestamp=1_660_000_000),
                make_tx("0x3", to=BA2, raw_amount="1", timestamp=1_655_000_000),
            ],
        )
        stats = dataset.address_stats[BA1]
        assert stats.count == 2
        assert stats.total_value == "350"
        assert stats.oldest_timestamp == 1_650_000_000
        assert stats.newest_timestamp == 1_660_000_000
        assert dataset.address_stats[BA2].count == 1

    def test_low_level_insert_rejects_duplicate(self, make_tx):
        dataset = Dataset()
        dataset.insert(make_tx("0x1"))
        with pytest.raises(DuplicateKeyError):
            dataset.insert(make_tx("0x1"))
