"""Custom exceptions for BurnLedger."""


class BurnLedgerError(Exception):
    """Base exception for burn ledger errors."""


class UpstreamError(BurnLedgerError):
    """Base for failures talking to an upstream API."""

    retryable = False

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class UpstreamUnavailableError(UpstreamError):
    """Raised on network or HTTP failure reaching the upstream source."""

    retryable = True


class UpstreamRateLimitedError(UpstreamError):
    """Raised when the upstream source explicitly signals a rate limit."""

    retryable = True


class UpstreamMalformedError(UpstreamError):
    """Raised when an upstream response has an unexpected shape or missing fields."""


class IntegrityMismatchError(BurnLedgerError):
    """Raised when the recomputed integrity hash differs from the stored one."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Data integrity hash mismatch: expected {expected}, got {actual}"
        )


class DuplicateKeyError(BurnLedgerError):
    """Raised when a transaction hash is inserted twice into a dataset."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction already present: {tx_hash}")


class StaleCacheError(BurnLedgerError):
    """Raised when a cache entry is older than its tier's max age."""

    def __init__(self, key: str, age: float, max_age: float):
        self.key = key
        self.age = age
        self.max_age = max_age
        super().__init__(f"Cache entry {key} is stale ({age:.0f}s old, max {max_age:.0f}s)")


class ConfigurationMissingError(BurnLedgerError):
    """Raised when a required setting such as the API credential is absent."""

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(f"Required configuration missing: {setting}")


class InvalidConfigurationError(BurnLedgerError):
    """Raised when a setting is present but has an unusable value."""

    def __init__(self, setting: str, detail: str):
        self.setting = setting
        super().__init__(f"Invalid configuration for {setting}: {detail}")


class LockedTransactionError(BurnLedgerError):
    """Raised on any attempt to modify a locked transaction."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"Transaction {tx_hash} is locked and cannot be modified")


class DatasetNotFoundError(BurnLedgerError):
    """Raised when an operation needs the historical dataset and none exists."""

    def __init__(self, message: str = "No historical dataset found. Run a full collection first."):
        super().__init__(message)


class BackupNotFoundError(BurnLedgerError):
    """Raised when no snapshot exists for the requested date."""

    def __init__(self, backup_date: str):
        self.backup_date = backup_date
        super().__init__(f"Backup not found for {backup_date}")
