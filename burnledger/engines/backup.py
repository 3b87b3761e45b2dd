"""Dated dataset snapshots with retention and manual restore."""

import json
import logging
import re
import time
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from burnledger.constants import BACKUP_RETENTION_DAYS
from burnledger.db.repository import DatasetRepository
from burnledger.exceptions import BackupNotFoundError
from burnledger.models.dataset import Dataset

logger = logging.getLogger(__name__)

_FILENAME_PREFIX = "burnledger-backup-"
_FILENAME_RE = re.compile(r"^burnledger-backup-(\d{4}-\d{2}-\d{2})\.json$")


def backup_filename(backup_date: date) -> str:
    return f"{_FILENAME_PREFIX}{backup_date.isoformat()}.json"


class BackupManager:
    """Writes one snapshot per day and prunes those past the retention window.

    Restore is a manual recovery path. Nothing in the pipeline calls it.
    """

    def __init__(
        self,
        backup_dir: Path,
        retention_days: int = BACKUP_RETENTION_DAYS,
        clock: Callable[[], float] = time.time,
    ):
        self.backup_dir = Path(backup_dir)
        self.retention_days = retention_days
        self.clock = clock

    def _today(self) -> date:
        return datetime.fromtimestamp(self.clock(), tz=timezone.utc).date()

    def snapshot(self, dataset: Dataset, backup_date: date | None = None) -> Path:
        """Write the dataset to the snapshot file for ``backup_date`` (default today).

        A second snapshot on the same date overwrites the first.
        """
        backup_date = backup_date or self._today()
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        path = self.backup_dir / backup_filename(backup_date)

        payload = dataset.to_snapshot()
        payload["backupDate"] = backup_date.isoformat()
        payload["backupTimestamp"] = self.clock()
        path.write_text(json.dumps(payload, indent=2))
        logger.info("Backup written: %s (%d transactions)", path.name, dataset.size)

        self.prune()
        return path

    def prune(self) -> list[Path]:
        """Delete snapshots older than the retention window. Returns removed paths."""
        cutoff = self._today() - timedelta(days=self.retention_days)
        removed = []
        for snapshot_date, path in self._snapshots():
            if snapshot_date < cutoff:
                path.unlink()
                removed.append(path)
                logger.info("Removed expired backup %s", path.name)
        return removed

    def list_snapshots(self) -> list[str]:
        """Available snapshot dates (ISO format), newest first."""
        return [d.isoformat() for d, _ in sorted(self._snapshots(), reverse=True)]

    def load(self, backup_date: str) -> Dataset:
        """Read the snapshot for an ISO date without touching the live dataset."""
        try:
            parsed = date.fromisoformat(backup_date)
        except ValueError as exc:
            raise BackupNotFoundError(backup_date) from exc
        path = self.backup_dir / backup_filename(parsed)
        if not path.exists():
            raise BackupNotFoundError(backup_date)
        return Dataset.from_snapshot(json.loads(path.read_text()))

    def restore(self, backup_date: str, repo: DatasetRepository) -> Dataset:
        """Replace the live dataset with the snapshot for ``backup_date``."""
        dataset = self.load(backup_date)
        repo.replace_dataset(dataset)
        logger.warning(
            "Live dataset replaced from backup %s (%d transactions)", backup_date, dataset.size
        )
        return dataset

    def _snapshots(self) -> list[tuple[date, Path]]:
        if not self.backup_dir.exists():
            return []
        found = []
        for path in self.backup_dir.iterdir():
            match = _FILENAME_RE.match(path.name)
            if not match:
                continue
            try:
                found.append((date.fromisoformat(match.group(1)), path))
            except ValueError:
                logger.debug("Ignoring backup with invalid date: %s", path.name)
        return found
