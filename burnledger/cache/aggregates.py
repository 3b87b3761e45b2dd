"""Cached aggregate reads: spot price, total burned, recent burns."""

import logging
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from burnledger.cache.tiered import CacheService
from burnledger.constants import DEFAULT_TOKEN_DECIMALS, SINK_ADDRESSES, TOTAL_BURNED_ADDRESSES
from burnledger.exceptions import ConfigurationMissingError, UpstreamError, UpstreamUnavailableError
from burnledger.ingestion.ledger_client import LedgerClient
from burnledger.ingestion.quote_client import QuoteClient
from burnledger.models.enums import CacheResource
from burnledger.models.reports import CacheResult
from burnledger.normalization.transactions import TransactionNormalizer

logger = logging.getLogger(__name__)

RECENT_PAGE_SIZE = 100


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


class AggregateService:
    """Aggregate endpoints fronted by a CacheService.

    Each method returns a plain dict. When neither a cache tier nor the
    upstream source can answer, the dict is an error payload with
    ``status: "unavailable"``.
    """

    def __init__(
        self,
        cache: CacheService,
        quotes: QuoteClient,
        ledger: LedgerClient | None = None,
        normalizer: TransactionNormalizer | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cache = cache
        self.quotes = quotes
        self.ledger = ledger
        self.normalizer = normalizer or TransactionNormalizer(clock=clock)
        self.clock = clock

    def _require_ledger(self) -> LedgerClient:
        if self.ledger is None:
            raise ConfigurationMissingError("ETHERSCAN_API_KEY")
        return self.ledger

    def _unavailable(self, error: str, message: str) -> dict:
        return {
            "error": error,
            "message": message,
            "status": "unavailable",
            "timestamp": _iso(self.clock()),
        }

    @staticmethod
    def _tagged(result: CacheResult, payload: dict) -> dict:
        return {
            **payload,
            "source": result.source.value,
            "cached": result.cached,
            "timestamp": _iso(result.last_updated),
        }

    def get_price(self) -> dict:
        result = self.cache.get_or_fetch(
            CacheResource.PRICE, lambda: self.quotes.get_quote().model_dump()
        )
        if result is None:
            return self._unavailable(
                "Price data unavailable", "Quote API failed and no valid cached price exists"
            )
        return self._tagged(
            result,
            {
                "price": result.data["price"],
                "price_change_24h": result.data["price_change_24h"],
            },
        )

    def _fetch_total_burned(self) -> dict:
        ledger = self._require_ledger()
        total = 0
        succeeded = 0
        for name, address in TOTAL_BURNED_ADDRESSES.items():
            try:
                total += ledger.get_token_balance(address)
                succeeded += 1
            except UpstreamError as exc:
                logger.warning("Balance query for %s failed: %s", name, exc)
        if not succeeded:
            raise UpstreamUnavailableError("ledger", "all burn address balance queries failed")
        return {
            "total_burned": str(Decimal(total).scaleb(-DEFAULT_TOKEN_DECIMALS)),
            "addresses_succeeded": succeeded,
            "addresses_attempted": len(TOTAL_BURNED_ADDRESSES),
        }

    def get_total_burned(self) -> dict:
        """Sum of burn address balances in whole tokens (decimal string)."""
        result = self.cache.get_or_fetch(CacheResource.TOTAL_BURNED, self._fetch_total_burned)
        if result is None:
            return self._unavailable(
                "Total burned unavailable", "All balance queries failed and no valid cache exists"
            )
        return self._tagged(result, dict(result.data))

    def _fetch_recent_burns(self) -> dict:
        ledger = self._require_ledger()
        by_hash = {}
        succeeded = 0
        for name, address in SINK_ADDRESSES.items():
            try:
                records = ledger.fetch_page(address, 1, RECENT_PAGE_SIZE)
            except UpstreamError as exc:
                logger.warning("Recent burns for %s failed: %s", name, exc)
                continue
            succeeded += 1
            accepted, _ = self.normalizer.normalize_many(records)
            for tx in accepted:
                by_hash.setdefault(tx.hash, tx)
        if not succeeded:
            raise UpstreamUnavailableError("ledger", "all sink address transfer queries failed")

        newest_first = sorted(by_hash.values(), key=lambda tx: tx.timestamp, reverse=True)
        return {
            "transactions": [tx.to_public() for tx in newest_first],
            "addresses_succeeded": succeeded,
            "addresses_attempted": len(SINK_ADDRESSES),
        }

    def get_recent_burns(self, limit: int = RECENT_PAGE_SIZE) -> dict:
        """Newest burns across all sink addresses, deduplicated by hash."""
        result = self.cache.get_or_fetch(CacheResource.RECENT_BURNS, self._fetch_recent_burns)
        if result is None:
            return self._unavailable(
                "Burn data unavailable", "All transfer queries failed and no valid cache exists"
            )
        payload = dict(result.data)
        payload["transactions"] = payload["transactions"][: max(limit, 0)]
        return self._tagged(result, payload)
