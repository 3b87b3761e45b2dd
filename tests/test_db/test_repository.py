"""Tests for DatasetRepository and the SQLite schema."""

import sqlite3

import pytest

from burnledger.models.dataset import Dataset
from burnledger.models.reports import ValidationLogEntry
from burnledger.normalization.ledger import merge_batch


def _entry(timestamp: float, is_valid: bool = True, locked: int = 0) -> ValidationLogEntry:
    return ValidationLogEntry(
        timestamp=timestamp,
        date="2023-11-14",
        is_valid=is_valid,
        errors=() if is_valid else ("bad",),
        warnings=("odd",),
        locked_count=locked,
        new_count=0,
        total_count=1,
        integrity_hash="deadbeef",
    )


class TestDatasetPersistence:
    def test_no_dataset_initially(self, repo):
        assert repo.load_dataset() is None
        assert repo.has_dataset() is False

    def test_save_and_load(self, repo, make_tx):
        dataset, _ = merge_batch(Dataset(), [make_tx("0x1", block=5), make_tx("0x2", block=9)])
        dataset.metadata.integrity_hash = "cafebabe"
        repo.save_dataset(dataset)

        loaded = repo.load_dataset()

        assert loaded.size == 2
        assert loaded.metadata.oldest_block == 5
        assert loaded.metadata.newest_block == 9
        assert loaded.metadata.integrity_hash == "cafebabe"
        assert loaded.address_stats == dataset.address_stats
        assert loaded.transactions["0x1"] == dataset.transactions["0x1"]

    def test_save_is_insert_only(self, repo, make_tx):
        dataset, _ = merge_batch(Dataset(), [make_tx("0x1", raw_amount="5")])
        repo.save_dataset(dataset)

        other, _ = merge_batch(Dataset(), [make_tx("0x1", raw_amount="7")])
        repo.save_dataset(other)

        assert repo.load_dataset().transactions["0x1"].raw_amount == "5"

    def test_lock_is_persisted(self, repo, make_tx):
        dataset, _ = merge_batch(Dataset(), [make_tx("0x1")])
        repo.save_dataset(dataset)

        dataset.transactions["0x1"].lock()
        repo.save_dataset(dataset)

        loaded = repo.load_dataset().transactions["0x1"]
        assert loaded.locked is True
        assert loaded.validated is True

    def test_locked_row_cannot_be_updated(self, repo, db_conn, make_tx):
        tx = make_tx("0x1")
        tx.lock()
        dataset, _ = merge_batch(Dataset(), [tx])
        repo.save_dataset(dataset)

        with pytest.raises(sqlite3.IntegrityError):
            db_conn.execute("UPDATE transactions SET raw_amount = '1' WHERE hash = '0x1'")

    def test_replace_dataset(self, repo, make_tx):
        first, _ = merge_batch(Dataset(), [make_tx("0x1"), make_tx("0x2")])
        first.transactions["0x1"].lock()
        repo.save_dataset(first)

        replacement, _ = merge_batch(Dataset(), [make_tx("0x9")])
        repo.replace_dataset(replacement)

        loaded = repo.load_dataset()
        assert set(loaded.transactions) == {"0x9"}
        assert loaded.metadata.total_count == 1


class TestValidationLog:
    def test_append_and_read(self, repo):
        repo.append_validation_log(_entry(100.0, is_valid=False, locked=3))
        entries = repo.get_validation_log()

        assert len(entries) == 1
        assert entries[0].is_valid is False
        assert entries[0].errors == ("bad",)
        assert entries[0].warnings == ("odd",)
        assert entries[0].locked_count == 3

    def test_oldest_first(self, repo):
        repo.append_validation_log(_entry(200.0))
        repo.append_validation_log(_entry(100.0))
        assert [e.timestamp for e in repo.get_validation_log()] == [100.0, 200.0]

    def test_prune(self, repo):
        for ts in (100.0, 200.0, 300.0):
            repo.append_validation_log(_entry(ts))

        assert repo.prune_validation_log(200.0) == 2
        assert [e.timestamp for e in repo.get_validation_log()] == [300.0]
