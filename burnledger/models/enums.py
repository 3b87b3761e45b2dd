"""Enumerations for BurnLedger."""

from enum import StrEnum


class IntegrityPolicy(StrEnum):
    FAIL_OPEN = "fail_open"
    FAIL_CLOSED = "fail_closed"


class CacheSource(StrEnum):
    MEMORY = "memory"
    DISK = "disk"
    UPSTREAM = "upstream"


class CacheResource(StrEnum):
    PRICE = "price"
    TOTAL_BURNED = "total_burned"
    RECENT_BURNS = "recent_burns"


class DiscrepancyKind(StrEnum):
    BLOCK_MISMATCH = "Block number mismatch"
    NOT_FOUND = "Transaction not found upstream"


class ClearStatus(StrEnum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    ERROR = "error"
