"""Collector entry points: full collection, incremental update, daily validation."""

import logging
import time
from datetime import date
from typing import Callable

from burnledger.config import Settings
from burnledger.constants import OPEN_END_BLOCK, PLACEHOLDER_API_KEYS, SINK_ADDRESSES
from burnledger.db.repository import DatasetRepository
from burnledger.engines.backup import BackupManager
from burnledger.engines.cross_validation import CrossValidator
from burnledger.engines.locking import DailyValidator, get_validation_history
from burnledger.engines.query import DEFAULT_LIMIT, query_paginated
from burnledger.exceptions import ConfigurationMissingError, DatasetNotFoundError, UpstreamError
from burnledger.ingestion.ledger_client import BlockRange, LedgerClient
from burnledger.models.dataset import Dataset
from burnledger.models.reports import (
    AddressCollectionResult,
    CollectionReport,
    CrossValidationResult,
    PaginatedBurns,
    ValidationHistory,
    ValidationResult,
)
from burnledger.normalization.integrity import compute_hash
from burnledger.normalization.ledger import merge_batch
from burnledger.normalization.transactions import TransactionNormalizer

logger = logging.getLogger(__name__)


class BurnCollector:
    """Drives the collect, normalize, merge and persist pipeline over all sink addresses.

    Per-address failures never abort a run. They are recorded in ``last_report``
    and the remaining addresses are still collected.
    """

    def __init__(
        self,
        repo: DatasetRepository,
        settings: Settings,
        client_factory: Callable[[str], LedgerClient] | None = None,
        backups: BackupManager | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.repo = repo
        self.settings = settings
        self.clock = clock
        self._sleep = sleep
        self.client_factory = client_factory or self._default_client
        self.backups = backups or BackupManager(settings.backup_dir, clock=clock)
        self.normalizer = TransactionNormalizer(clock=clock)
        self.last_report: CollectionReport | None = None

    def _default_client(self, api_key: str) -> LedgerClient:
        return LedgerClient(
            api_key,
            request_delay=self.settings.request_delay,
            timeout=self.settings.request_timeout,
            sleep=self._sleep,
        )

    def _client(self, credential: str | None = None) -> LedgerClient:
        if credential is None:
            credential = self.settings.require_api_key()
        if not credential or credential in PLACEHOLDER_API_KEYS:
            raise ConfigurationMissingError("ETHERSCAN_API_KEY")
        return self.client_factory(credential)

    def _collect(
        self, client: LedgerClient, dataset: Dataset, block_range: BlockRange
    ) -> CollectionReport:
        report = CollectionReport()
        for name, address in SINK_ADDRESSES.items():
            logger.info("Collecting %s (%s) blocks %d-%d", name, address, block_range.start, block_range.end)
            fetched = client.fetch_all(address, self.settings.page_size, block_range)
            accepted, rejected = self.normalizer.normalize_many(fetched.records)
            dataset, added = merge_batch(dataset, accepted)
            result = AddressCollectionResult(
                name=name,
                address=address,
                fetched=len(fetched.records),
                accepted=len(accepted),
                rejected=len(rejected),
                added=added,
                pages=fetched.pages,
                error=fetched.error,
            )
            if result.succeeded:
                logger.info("%s: %d fetched, %d new", name, result.fetched, added)
            else:
                logger.warning("%s: partial result (%d fetched): %s", name, result.fetched, result.error)
            report.results.append(result)
            report.added_count += added

        report.total_count = dataset.size
        return report

    def trigger_full_collection(self, credential: str | None) -> Dataset:
        """Collect every sink address from the first block and persist the merged dataset."""
        if not credential:
            raise ConfigurationMissingError("ETHERSCAN_API_KEY")
        client = self._client(credential)
        dataset = self.repo.load_dataset() or Dataset()

        self.last_report = self._collect(client, dataset, BlockRange())

        dataset.metadata.last_full_sync = self.clock()
        dataset.metadata.integrity_hash = compute_hash(dataset)
        self.repo.save_dataset(dataset)
        logger.info(
            "Full collection complete: %d new, %d total (%d/%d addresses succeeded)",
            self.last_report.added_count,
            dataset.size,
            self.last_report.addresses_succeeded,
            len(self.last_report.results),
        )
        return dataset

    def trigger_incremental_update(self) -> Dataset | None:
        """Fetch blocks after the newest stored block. Returns None if no dataset exists."""
        dataset = self.repo.load_dataset()
        if dataset is None:
            logger.warning("Incremental update skipped: no historical dataset")
            return None

        client = self._client()
        try:
            current_block = client.get_block_number()
        except UpstreamError as exc:
            logger.warning("Could not read current block, using open range: %s", exc)
            current_block = OPEN_END_BLOCK

        newest = dataset.metadata.newest_block
        if newest is not None and current_block <= newest:
            logger.info("Dataset is current (block %d)", newest)
            self.last_report = CollectionReport(total_count=dataset.size)
            return dataset

        start = newest + 1 if newest is not None else BlockRange().start
        self.last_report = self._collect(client, dataset, BlockRange(start=start, end=current_block))

        if self.last_report.added_count:
            dataset.metadata.integrity_hash = compute_hash(dataset)
            self.repo.save_dataset(dataset)
        logger.info("Incremental update added %d transactions", self.last_report.added_count)
        return dataset

    def trigger_daily_validation(self, raise_on_error: bool = False) -> ValidationResult:
        validator = DailyValidator(
            self.repo, self.backups, policy=self.settings.integrity_policy, clock=self.clock
        )
        return validator.run(raise_on_error=raise_on_error)

    def cross_validate(self) -> CrossValidationResult:
        """Advisory upstream re-check of recent unlocked transactions."""
        dataset = self.repo.load_dataset()
        if dataset is None:
            return CrossValidationResult(
                success=False, errors=["No historical dataset found. Run a full collection first."]
            )
        validator = CrossValidator(self._client(), clock=self.clock)
        return validator.validate(dataset)

    def validation_history(self) -> ValidationHistory:
        return get_validation_history(self.repo)

    def restore_backup(self, backup_date: str) -> Dataset:
        return self.backups.restore(backup_date, self.repo)

    def query_paginated(
        self,
        page: int = 1,
        limit: int = DEFAULT_LIMIT,
        address: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> PaginatedBurns:
        dataset = self.repo.load_dataset()
        if dataset is None:
            raise DatasetNotFoundError()
        return query_paginated(dataset, page, limit, address, start_date, end_date)
