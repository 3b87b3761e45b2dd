"""Data models for BurnLedger."""

from burnledger.models.dataset import AddressStats, Dataset, DatasetMetadata
from burnledger.models.enums import (
    CacheResource,
    CacheSource,
    ClearStatus,
    DiscrepancyKind,
    IntegrityPolicy,
)
from burnledger.models.reports import (
    AddressCollectionResult,
    CacheClearResult,
    CacheResult,
    CollectionReport,
    CrossValidationResult,
    Discrepancy,
    IntegrityReport,
    PaginatedBurns,
    PaginationInfo,
    ValidationHistory,
    ValidationLogEntry,
    ValidationResult,
)
from burnledger.models.transaction import Transaction

__all__ = [
    "AddressCollectionResult",
    "AddressStats",
    "CacheClearResult",
    "CacheResource",
    "CacheResult",
    "CacheSource",
    "ClearStatus",
    "CollectionReport",
    "CrossValidationResult",
    "Dataset",
    "DatasetMetadata",
    "Discrepancy",
    "DiscrepancyKind",
    "IntegrityPolicy",
    "IntegrityReport",
    "PaginatedBurns",
    "PaginationInfo",
    "Transaction",
    "ValidationHistory",
    "ValidationLogEntry",
    "ValidationResult",
]
