"""Data access layer for BurnLedger."""

import json
import sqlite3

from burnledger.models.dataset import AddressStats, Dataset, DatasetMetadata
from burnledger.models.reports import ValidationLogEntry
from burnledger.models.transaction import Transaction

_TRANSACTION_COLUMNS = (
    "hash, from_address, to_address, raw_amount, token_decimals, token_name, "
    "token_symbol, timestamp, block_number, first_seen, validated, locked"
)


def _transaction_params(tx: Transaction) -> tuple:
    return (
        tx.hash,
        tx.from_address,
        tx.to,
        tx.raw_amount,
        tx.token_decimals,
        tx.token_name,
        tx.token_symbol,
        tx.timestamp,
        tx.block_number,
        tx.first_seen,
        int(tx.validated),
        int(tx.locked),
    )


def _row_to_transaction(record: dict) -> Transaction:
    return Transaction(
        hash=record["hash"],
        from_address=record["from_address"],
        to=record["to_address"],
        raw_amount=record["raw_amount"],
        token_decimals=record["token_decimals"],
        token_name=record["token_name"],
        token_symbol=record["token_symbol"],
        timestamp=record["timestamp"],
        block_number=record["block_number"],
        first_seen=record["first_seen"],
        validated=bool(record["validated"]),
        locked=bool(record["locked"]),
    )


class DatasetRepository:
    """Persistence for the historical dataset and the validation log."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _fetch_dicts(self, query: str, params: tuple = ()) -> list[dict]:
        cursor = self.conn.execute(query, params)
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    # --- Dataset ---

    def has_dataset(self) -> bool:
        cursor = self.conn.execute("SELECT COUNT(*) FROM dataset_metadata")
        return cursor.fetchone()[0] > 0

    def load_dataset(self) -> Dataset | None:
        """Load the full dataset, or None if no collection has ever been persisted."""
        meta_rows = self._fetch_dicts("SELECT * FROM dataset_metadata WHERE id = 1")
        if not meta_rows:
            return None
        meta = meta_rows[0]
        meta.pop("id")

        transactions = {}
        for record in self._fetch_dicts(f"SELECT {_TRANSACTION_COLUMNS} FROM transactions"):
            tx = _row_to_transaction(record)
            transactions[tx.hash] = tx

        address_stats = {}
        for record in self._fetch_dicts("SELECT * FROM address_stats"):
            address = record.pop("address")
            address_stats[address] = AddressStats(**record)

        return Dataset(
            transactions=transactions,
            metadata=DatasetMetadata(**meta),
            address_stats=address_stats,
        )

    def save_dataset(self, dataset: Dataset) -> None:
        """Persist a dataset in one transaction.

        Rows are insert-only. The only change applied to an existing row is the
        one-way lock, and the schema trigger rejects updates to locked rows.
        """
        try:
            self.conn.executemany(
                f"INSERT OR IGNORE INTO transactions ({_TRANSACTION_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [_transaction_params(tx) for tx in dataset.transactions.values()],
            )
            self.conn.executemany(
                "UPDATE transactions SET validated = 1, locked = 1 WHERE hash = ? AND locked = 0",
                [(tx.hash,) for tx in dataset.transactions.values() if tx.locked],
            )
            self._write_metadata(dataset)
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

    def replace_dataset(self, dataset: Dataset) -> None:
        """Replace the live dataset wholesale. Used only by backup recovery."""
        try:
            self.conn.execute("DELETE FROM transactions")
            self.conn.execute("DELETE FROM address_stats")
            self.conn.executemany(
                f"INSERT INTO transactions ({_TRANSACTION_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                [_transaction_params(tx) for tx in dataset.transactions.values()],
            )
            self._write_metadata(dataset)
            self.conn.commit()
        except sqlite3.Error:
            self.conn.rollback()
            raise

    def _write_metadata(self, dataset: Dataset) -> None:
        meta = dataset.metadata
        self.conn.execute(
            """INSERT OR REPLACE INTO dataset_metadata
               (id, oldest_block, newest_block, total_count, last_full_sync,
                last_validation, integrity_hash)
               VALUES (1, ?, ?, ?, ?, ?, ?)""",
            (
                meta.oldest_block,
                meta.newest_block,
                meta.total_count,
                meta.last_full_sync,
                meta.last_validation,
                meta.integrity_hash,
            ),
        )
        self.conn.executemany(
            """INSERT OR REPLACE INTO address_stats
               (address, count, total_value, oldest_timestamp, newest_timestamp)
               VALUES (?, ?, ?, ?, ?)""",
            [
                (
                    address,
                    stats.count,
                    stats.total_value,
                    stats.oldest_timestamp,
                    stats.newest_timestamp,
                )
                for address, stats in dataset.address_stats.items()
            ],
        )

    # --- Validation log ---

    def append_validation_log(self, entry: ValidationLogEntry) -> None:
        """Insert a validation log entry."""
        self.conn.execute(
            """INSERT INTO validation_log
               (timestamp, date, is_valid, errors, warnings, locked_count,
                new_count, total_count, integrity_hash)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                entry.timestamp,
                entry.date,
                int(entry.is_valid),
                json.dumps(list(entry.errors)),
                json.dumps(list(entry.warnings)),
                entry.locked_count,
                entry.new_count,
                entry.total_count,
                entry.integrity_hash,
            ),
        )
        self.conn.commit()

    def get_validation_log(self) -> list[ValidationLogEntry]:
        """Retrieve all validation log entries, oldest first."""
        entries = []
        for record in self._fetch_dicts("SELECT * FROM validation_log ORDER BY timestamp, id"):
            record.pop("id")
            record["is_valid"] = bool(record["is_valid"])
            record["errors"] = tuple(json.loads(record["errors"]))
            record["warnings"] = tuple(json.loads(record["warnings"]))
            entries.append(ValidationLogEntry(**record))
        return entries

    def prune_validation_log(self, cutoff: float) -> int:
        """Delete log entries older than ``cutoff`` (unix seconds). Returns count deleted."""
        cursor = self.conn.execute(
            "DELETE FROM validation_log WHERE timestamp <= ?", (cutoff,)
        )
        self.conn.commit()
        return cursor.rowcount
