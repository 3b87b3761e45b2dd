"""Advisory re-check of recent transactions against the upstream source."""

import logging
import time
from typing import Callable

from burnledger.constants import CROSS_VALIDATION_WINDOW_SECONDS
from burnledger.exceptions import UpstreamError
from burnledger.ingestion.ledger_client import LedgerClient
from burnledger.models.dataset import Dataset
from burnledger.models.enums import DiscrepancyKind
from burnledger.models.reports import CrossValidationResult, Discrepancy

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10


class CrossValidator:
    """Looks up a bounded sample of recent unlocked transactions by hash.

    Never mutates the dataset. Discrepancies are reported, not repaired.
    """

    def __init__(
        self,
        client: LedgerClient,
        sample_size: int = SAMPLE_SIZE,
        window_seconds: float = CROSS_VALIDATION_WINDOW_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.sample_size = sample_size
        self.window_seconds = window_seconds
        self.clock = clock

    def sample(self, dataset: Dataset) -> list:
        """Unlocked transactions inside the window, newest first, capped at sample_size."""
        cutoff = self.clock() - self.window_seconds
        recent = [tx for tx in dataset.unlocked() if tx.timestamp > cutoff]
        recent.sort(key=lambda tx: tx.timestamp, reverse=True)
        return recent[: self.sample_size]

    def validate(self, dataset: Dataset) -> CrossValidationResult:
        sampled = self.sample(dataset)
        logger.info("Cross-validating %d recent transactions", len(sampled))

        discrepancies: list[Discrepancy] = []
        errors: list[str] = []
        validated = 0
        for tx in sampled:
            try:
                upstream = self.client.get_transaction(tx.hash)
            except UpstreamError as exc:
                logger.warning("Failed to cross-validate %s: %s", tx.hash, exc)
                errors.append(f"{tx.hash}: {exc}")
                continue

            if upstream is None:
                discrepancies.append(
                    Discrepancy(hash=tx.hash, issue=DiscrepancyKind.NOT_FOUND, cached=tx.block_number)
                )
                continue

            upstream_block = _parse_block(upstream.get("blockNumber"))
            if upstream_block != tx.block_number:
                discrepancies.append(
                    Discrepancy(
                        hash=tx.hash,
                        issue=DiscrepancyKind.BLOCK_MISMATCH,
                        cached=tx.block_number,
                        upstream=upstream_block,
                    )
                )
            else:
                validated += 1

        if discrepancies:
            logger.warning("Cross-validation found %d discrepancies", len(discrepancies))
        return CrossValidationResult(
            success=True,
            sampled_count=len(sampled),
            validated_count=validated,
            discrepancies=discrepancies,
            errors=errors,
        )


def _parse_block(value) -> int | None:
    # Proxy results carry hex quantities; pending transactions have no block.
    if value is None:
        return None
    try:
        return int(str(value), 16) if str(value).startswith("0x") else int(value)
    except ValueError:
        return None
