"""Tests for the integrity hash."""

import re

from burnledger.models.dataset import Dataset
from burnledger.normalization.integrity import compute_hash
from burnledger.normalization.ledger import merge_batch


def _dataset(make_tx, hashes):
    dataset, _ = merge_batch(Dataset(), [make_tx(h) for h in hashes])
    return dataset


class TestComputeHash:
    def test_format(self, make_tx):
        assert re.fullmatch(r"[0-9a-f]{8}", compute_hash(_dataset(make_tx, ["0x1"])))

    def test_insertion_order_independent(self, make_tx):
        forward = _dataset(make_tx, ["0x1", "0x2", "0x3"])
        backward = _dataset(make_tx, ["0x3", "0x2", "0x1"])
        assert compute_hash(forward) == compute_hash(backward)

    def test_changes_with_key_set(self, make_tx):
        base = _dataset(make_tx, ["0x1", "0x2"])
        grown = _dataset(make_tx, ["0x1", "0x2", "0x3"])
        assert compute_hash(base) != compute_hash(grown)

    def test_ignores_record_content(self, make_tx):
        first, _ = merge_batch(Dataset(), [make_tx("0x1", raw_amount="1")])
        second, _ = merge_batch(Dataset(), [make_tx("0x1", raw_amount="2")])
        assert compute_hash(first) == compute_hash(second)

    def test_empty_dataset(self):
        assert compute_hash(Dataset()) == "00000000"
