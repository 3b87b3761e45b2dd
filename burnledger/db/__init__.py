"""Database layer for BurnLedger."""

from burnledger.db.repository import DatasetRepository
from burnledger.db.schema import create_schema

__all__ = ["DatasetRepository", "create_schema"]
