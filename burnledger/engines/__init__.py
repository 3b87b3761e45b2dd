"""Lock/validation, cross-validation, backup, collection and query engines."""

from burnledger.engines.backup import BackupManager
from burnledger.engines.collector import BurnCollector
from burnledger.engines.cross_validation import CrossValidator
from burnledger.engines.locking import DailyValidator, get_validation_history
from burnledger.engines.query import query_paginated

__all__ = [
    "BackupManager",
    "BurnCollector",
    "CrossValidator",
    "DailyValidator",
    "get_validation_history",
    "query_paginated",
]
