"""Filtered, paginated reads over the historical dataset."""

import math
from datetime import date, datetime, time, timedelta, timezone

from burnledger.exceptions import DatasetNotFoundError
from burnledger.models.dataset import Dataset
from burnledger.models.reports import PaginatedBurns, PaginationInfo

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def _day_start(day: date) -> int:
    return int(datetime.combine(day, time.min, tzinfo=timezone.utc).timestamp())


def _iso_utc(timestamp: float) -> str | None:
    if not timestamp:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def query_paginated(
    dataset: Dataset | None,
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
    address: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> PaginatedBurns:
    """Return one page of transactions, newest first.

    Args:
        dataset: The live dataset; None raises DatasetNotFoundError.
        page: 1-based page number; values below 1 are treated as 1.
        limit: Page size, clamped to 1..1000.
        address: Matches either ``to`` or ``from``, case-insensitive. "all" disables it.
        start_date: Inclusive lower bound (UTC day).
        end_date: Inclusive upper bound (UTC day).
    """
    if dataset is None:
        raise DatasetNotFoundError()

    page = max(page, 1)
    limit = min(max(limit, 1), MAX_LIMIT)

    transactions = list(dataset.transactions.values())
    if address and address.lower() != "all":
        wanted = address.lower()
        transactions = [
            tx for tx in transactions
            if tx.to.lower() == wanted or tx.from_address.lower() == wanted
        ]
    if start_date:
        lower = _day_start(start_date)
        transactions = [tx for tx in transactions if tx.timestamp >= lower]
    if end_date:
        upper = _day_start(end_date + timedelta(days=1))
        transactions = [tx for tx in transactions if tx.timestamp < upper]

    transactions.sort(key=lambda tx: (tx.timestamp, tx.block_number), reverse=True)

    total = len(transactions)
    total_pages = math.ceil(total / limit)
    offset = (page - 1) * limit
    items = [tx.to_public() for tx in transactions[offset:offset + limit]]

    meta = dataset.metadata
    return PaginatedBurns(
        items=items,
        pagination=PaginationInfo(
            page=page,
            limit=limit,
            total_transactions=total,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        ),
        filters={
            "address": address,
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
        },
        metadata={
            "oldest_block": meta.oldest_block,
            "newest_block": meta.newest_block,
            "last_sync": _iso_utc(meta.last_full_sync),
            "last_validation": _iso_utc(meta.last_validation),
            "integrity_hash": meta.integrity_hash,
            "address_stats": {
                addr: stats.model_dump() for addr, stats in dataset.address_stats.items()
            },
        },
    )
