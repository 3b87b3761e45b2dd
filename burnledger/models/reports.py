"""Result and report models returned by the collector, validator and cache."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from burnledger.models.enums import CacheSource, ClearStatus, DiscrepancyKind


class ValidationLogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: float
    date: str
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    locked_count: int
    new_count: int
    total_count: int
    integrity_hash: str


class IntegrityReport(BaseModel):
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    stats: dict[str, Any] = Field(default_factory=dict)


class ValidationResult(BaseModel):
    success: bool
    persisted: bool = False
    locked_count: int = 0
    new_count: int = 0
    report: IntegrityReport | None = None
    backup_path: str | None = None
    errors: list[str] = Field(default_factory=list)


class ValidationHistory(BaseModel):
    recent_validations: list[ValidationLogEntry]
    total_days: int
    success_rate: float
    total_transactions_locked: int


class Discrepancy(BaseModel):
    hash: str
    issue: DiscrepancyKind
    cached: int
    upstream: int | None = None


class CrossValidationResult(BaseModel):
    success: bool
    sampled_count: int = 0
    validated_count: int = 0
    discrepancies: list[Discrepancy] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class AddressCollectionResult(BaseModel):
    name: str
    address: str
    fetched: int = 0
    accepted: int = 0
    rejected: int = 0
    added: int = 0
    pages: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class CollectionReport(BaseModel):
    results: list[AddressCollectionResult] = Field(default_factory=list)
    added_count: int = 0
    total_count: int = 0

    @property
    def addresses_succeeded(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def addresses_failed(self) -> int:
        return sum(1 for r in self.results if not r.succeeded)


class PaginationInfo(BaseModel):
    page: int
    limit: int
    total_transactions: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class PaginatedBurns(BaseModel):
    items: list[dict[str, Any]]
    pagination: PaginationInfo
    filters: dict[str, Any]
    metadata: dict[str, Any]


class CacheResult(BaseModel):
    data: Any
    source: CacheSource
    cached: bool
    last_updated: float


class CacheClearResult(BaseModel):
    file: str
    status: ClearStatus
    error: str | None = None
