"""Daily lock and validation pass over the historical dataset.

Steps of a run:
1. Lock every unlocked transaction older than the 24h freshness window
2. Recompute the integrity hash and compare it with the stored one
3. Re-check keys for duplicates and timestamps for plausibility
4. Persist, write the dated backup, append the validation log entry

Under IntegrityPolicy.FAIL_CLOSED a run with errors persists nothing and
writes no backup; the log entry is still appended.
"""

import logging
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Callable

from burnledger.constants import (
    CLOCK_SKEW_TOLERANCE_SECONDS,
    DOMAIN_ORIGIN_TIMESTAMP,
    FRESHNESS_WINDOW_SECONDS,
    VALIDATION_LOG_RETENTION_DAYS,
)
from burnledger.db.repository import DatasetRepository
from burnledger.engines.backup import BackupManager
from burnledger.exceptions import IntegrityMismatchError
from burnledger.models.dataset import Dataset
from burnledger.models.enums import IntegrityPolicy
from burnledger.models.reports import (
    IntegrityReport,
    ValidationHistory,
    ValidationLogEntry,
    ValidationResult,
)
from burnledger.normalization.integrity import compute_hash

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 30


def lock_stale(dataset: Dataset, threshold: float) -> int:
    """Lock unlocked transactions with a timestamp before ``threshold``. Returns count locked."""
    locked = 0
    for tx in dataset.unlocked():
        if tx.timestamp < threshold and tx.lock():
            locked += 1
    return locked


def check_integrity(dataset: Dataset, now: float) -> IntegrityReport:
    """Structural checks: stored hash, key consistency, timestamp plausibility."""
    errors: list[str] = []
    warnings: list[str] = []

    current_hash = compute_hash(dataset)
    expected = dataset.metadata.integrity_hash
    if current_hash != expected:
        errors.append(str(IntegrityMismatchError(expected, current_hash)))

    misfiled = [key for key, tx in dataset.transactions.items() if key != tx.hash]
    if misfiled:
        errors.append(f"Found {len(misfiled)} transactions stored under a foreign key")

    collisions = [k for k, n in Counter(k.lower() for k in dataset.transactions).items() if n > 1]
    if collisions:
        errors.append(f"Found {len(collisions)} duplicate transactions")

    too_old = 0
    future = 0
    for tx in dataset.transactions.values():
        if tx.timestamp < DOMAIN_ORIGIN_TIMESTAMP:
            too_old += 1
        if tx.timestamp > now + CLOCK_SKEW_TOLERANCE_SECONDS:
            future += 1
    if too_old:
        warnings.append(f"Found {too_old} transactions with invalid timestamps")
    if future:
        warnings.append(f"Found {future} transactions with future timestamps")

    stats = {
        "total_transactions": dataset.size,
        "duplicates": len(collisions) + len(misfiled),
        "invalid_timestamps": too_old,
        "future_timestamps": future,
        "address_breakdown": {a: s.count for a, s in dataset.address_stats.items()},
    }
    return IntegrityReport(is_valid=not errors, errors=errors, warnings=warnings, stats=stats)


class DailyValidator:
    """Runs the lock pass, integrity checks, persistence and backup for one day."""

    def __init__(
        self,
        repo: DatasetRepository,
        backups: BackupManager,
        policy: IntegrityPolicy = IntegrityPolicy.FAIL_OPEN,
        clock: Callable[[], float] = time.time,
    ):
        self.repo = repo
        self.backups = backups
        self.policy = policy
        self.clock = clock

    def run(self, raise_on_error: bool = False) -> ValidationResult:
        """Run one validation pass.

        Args:
            raise_on_error: Under FAIL_CLOSED, raise IntegrityMismatchError on a
                hash mismatch instead of reporting it in the result.
        """
        dataset = self.repo.load_dataset()
        if dataset is None:
            logger.error("Daily validation skipped: no historical dataset")
            return ValidationResult(
                success=False,
                errors=["No historical dataset found. Run a full collection first."],
            )

        now = self.clock()
        threshold = now - FRESHNESS_WINDOW_SECONDS
        locked_count = lock_stale(dataset, threshold)
        new_count = len(dataset.unlocked())
        logger.info("Locked %d transactions, %d remain unlocked", locked_count, new_count)

        report = check_integrity(dataset, now)
        for error in report.errors:
            logger.error("Validation error: %s", error)
        for warning in report.warnings:
            logger.warning("Validation warning: %s", warning)

        blocked = self.policy == IntegrityPolicy.FAIL_CLOSED and not report.is_valid
        stored_hash = dataset.metadata.integrity_hash
        current_hash = compute_hash(dataset)

        backup_path = None
        if not blocked:
            dataset.metadata.last_validation = now
            dataset.metadata.integrity_hash = current_hash
            self.repo.save_dataset(dataset)
            backup_path = str(self.backups.snapshot(dataset))

        self._append_log(now, report, locked_count, new_count, dataset.size, current_hash)

        if blocked:
            logger.error("Validation failed under %s policy; dataset not persisted", self.policy)
            if raise_on_error and stored_hash != current_hash:
                raise IntegrityMismatchError(stored_hash, current_hash)

        return ValidationResult(
            success=not blocked,
            persisted=not blocked,
            locked_count=locked_count,
            new_count=new_count,
            report=report,
            backup_path=backup_path,
            errors=list(report.errors),
        )

    def _append_log(
        self,
        now: float,
        report: IntegrityReport,
        locked_count: int,
        new_count: int,
        total_count: int,
        integrity_hash: str,
    ) -> None:
        entry = ValidationLogEntry(
            timestamp=now,
            date=datetime.fromtimestamp(now, tz=timezone.utc).date().isoformat(),
            is_valid=report.is_valid,
            errors=tuple(report.errors),
            warnings=tuple(report.warnings),
            locked_count=locked_count,
            new_count=new_count,
            total_count=total_count,
            integrity_hash=integrity_hash,
        )
        self.repo.append_validation_log(entry)
        pruned = self.repo.prune_validation_log(now - VALIDATION_LOG_RETENTION_DAYS * 86400)
        if pruned:
            logger.info("Pruned %d validation log entries", pruned)


def get_validation_history(repo: DatasetRepository, limit: int = HISTORY_LIMIT) -> ValidationHistory:
    """Summary of the validation log: recent entries, success rate, locked total."""
    entries = repo.get_validation_log()
    recent = entries[-limit:]
    passed = sum(1 for e in entries if e.is_valid)
    success_rate = round(passed / len(entries) * 100, 1) if entries else 0.0
    return ValidationHistory(
        recent_validations=recent,
        total_days=len(entries),
        success_rate=success_rate,
        total_transactions_locked=sum(e.locked_count for e in entries),
    )
