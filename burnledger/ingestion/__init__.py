"""Upstream clients for ledger transfers and price quotes."""

from burnledger.ingestion.ledger_client import BlockRange, FetchResult, LedgerClient
from burnledger.ingestion.quote_client import Quote, QuoteClient
from burnledger.ingestion.retry import RetryPolicy

__all__ = ["BlockRange", "FetchResult", "LedgerClient", "Quote", "QuoteClient", "RetryPolicy"]
