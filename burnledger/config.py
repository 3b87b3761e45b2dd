"""Runtime settings read from the environment."""

import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from burnledger.constants import PLACEHOLDER_API_KEYS
from burnledger.exceptions import ConfigurationMissingError, InvalidConfigurationError
from burnledger.models.enums import IntegrityPolicy

DEFAULT_HOME = Path.home() / ".burnledger"

_ENV_FIELDS = {
    "integrity_policy": "BURNLEDGER_INTEGRITY_POLICY",
    "page_size": "BURNLEDGER_PAGE_SIZE",
    "request_delay": "BURNLEDGER_REQUEST_DELAY",
    "request_timeout": "BURNLEDGER_REQUEST_TIMEOUT",
}


class Settings(BaseModel):
    api_key: str | None = None
    home: Path = DEFAULT_HOME
    integrity_policy: IntegrityPolicy = IntegrityPolicy.FAIL_OPEN
    page_size: int = Field(default=1000, ge=1, le=10000)
    request_delay: float = Field(default=1.0, ge=0)
    request_timeout: float = Field(default=30.0, gt=0)

    @classmethod
    def from_env(cls, home: Path | None = None) -> "Settings":
        """Build settings from environment variables, with an optional home override.

        Raises InvalidConfigurationError when a variable cannot be used.
        """
        env_home = os.environ.get("BURNLEDGER_HOME")
        values = {
            "api_key": os.environ.get("ETHERSCAN_API_KEY") or None,
            "home": home or (Path(env_home) if env_home else DEFAULT_HOME),
        }
        for field, variable in _ENV_FIELDS.items():
            if variable in os.environ:
                values[field] = os.environ[variable]
        try:
            return cls(**values)
        except ValidationError as exc:
            error = exc.errors()[0]
            field = error["loc"][0] if error["loc"] else "settings"
            raise InvalidConfigurationError(
                _ENV_FIELDS.get(field, str(field)), error["msg"]
            ) from exc

    @property
    def db_path(self) -> Path:
        return self.home / "burnledger.db"

    @property
    def backup_dir(self) -> Path:
        return self.home / "backups"

    @property
    def cache_dir(self) -> Path:
        return self.home / "cache"

    def has_api_key(self) -> bool:
        return bool(self.api_key) and self.api_key not in PLACEHOLDER_API_KEYS

    def require_api_key(self) -> str:
        """Return the upstream credential or raise if it is absent or a placeholder."""
        if not self.has_api_key():
            raise ConfigurationMissingError("ETHERSCAN_API_KEY")
        return self.api_key
