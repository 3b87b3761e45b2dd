"""Historical dataset: transactions keyed by hash, metadata, per-address stats."""

from pydantic import BaseModel, Field

from burnledger.exceptions import DuplicateKeyError
from burnledger.models.transaction import Transaction


class DatasetMetadata(BaseModel):
    oldest_block: int | None = None
    newest_block: int | None = None
    total_count: int = 0
    last_full_sync: float = 0.0
    last_validation: float = 0.0
    integrity_hash: str = ""


class AddressStats(BaseModel):
    count: int = 0
    total_value: str = "0"  # raw units, arbitrary precision
    oldest_timestamp: int | None = None
    newest_timestamp: int | None = None

    def record(self, tx: Transaction) -> None:
        """Fold one newly inserted transaction into the running stats."""
        self.count += 1
        self.total_value = str(int(self.total_value) + int(tx.raw_amount))
        if self.oldest_timestamp is None or tx.timestamp < self.oldest_timestamp:
            self.oldest_timestamp = tx.timestamp
        if self.newest_timestamp is None or tx.timestamp > self.newest_timestamp:
            self.newest_timestamp = tx.timestamp


class Dataset(BaseModel):
    transactions: dict[str, Transaction] = Field(default_factory=dict)
    metadata: DatasetMetadata = Field(default_factory=DatasetMetadata)
    address_stats: dict[str, AddressStats] = Field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.transactions)

    def contains(self, tx_hash: str) -> bool:
        return tx_hash in self.transactions

    def insert(self, tx: Transaction) -> None:
        """Insert a transaction under its own hash. Existing keys are never overwritten."""
        if tx.hash in self.transactions:
            raise DuplicateKeyError(tx.hash)
        self.transactions[tx.hash] = tx

    def unlocked(self) -> list[Transaction]:
        return [tx for tx in self.transactions.values() if not tx.locked]

    def to_snapshot(self) -> dict:
        """Serialize to the on-disk JSON shape: transactions as [hash, record] pairs."""
        return {
            "transactions": [
                [tx_hash, tx.model_dump(mode="json", by_alias=True)]
                for tx_hash, tx in self.transactions.items()
            ],
            "metadata": self.metadata.model_dump(mode="json"),
            "address_stats": {
                address: stats.model_dump(mode="json")
                for address, stats in self.address_stats.items()
            },
        }

    @classmethod
    def from_snapshot(cls, data: dict) -> "Dataset":
        """Rebuild a dataset from the JSON shape produced by ``to_snapshot``."""
        transactions = {
            tx_hash: Transaction.model_validate(record)
            for tx_hash, record in data.get("transactions", [])
        }
        return cls(
            transactions=transactions,
            metadata=DatasetMetadata.model_validate(data.get("metadata") or {}),
            address_stats={
                address: AddressStats.model_validate(stats)
                for address, stats in (data.get("address_stats") or {}).items()
            },
        )
