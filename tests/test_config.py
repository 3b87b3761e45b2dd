"""Tests for environment-driven settings."""

from pathlib import Path

import pytest

from burnledger.config import Settings
from burnledger.exceptions import ConfigurationMissingError, InvalidConfigurationError
from burnledger.models.enums import IntegrityPolicy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ETHERSCAN_API_KEY",
        "BURNLEDGER_HOME",
        "BURNLEDGER_INTEGRITY_POLICY",
        "BURNLEDGER_PAGE_SIZE",
        "BURNLEDGER_REQUEST_DELAY",
        "BURNLEDGER_REQUEST_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env()
        assert settings.api_key is None
        assert settings.home == Path.home() / ".burnledger"
        assert settings.integrity_policy == IntegrityPolicy.FAIL_OPEN
        assert settings.page_size == 1000
        assert settings.request_delay == 1.0
        assert settings.request_timeout == 30.0

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ETHERSCAN_API_KEY", "abc123")
        monkeypatch.setenv("BURNLEDGER_HOME", str(tmp_path))
        monkeypatch.setenv("BURNLEDGER_INTEGRITY_POLICY", "fail_closed")
        monkeypatch.setenv("BURNLEDGER_PAGE_SIZE", "250")

        settings = Settings.from_env()

        assert settings.api_key == "abc123"
        assert settings.db_path == tmp_path / "burnledger.db"
        assert settings.backup_dir == tmp_path / "backups"
        assert settings.cache_dir == tmp_path / "cache"
        assert settings.integrity_policy == IntegrityPolicy.FAIL_CLOSED
        assert settings.page_size == 250

    def test_home_override(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BURNLEDGER_HOME", "/elsewhere")
        assert Settings.from_env(home=tmp_path).home == tmp_path

    def test_placeholder_key_counts_as_missing(self):
        settings = Settings(api_key="YourApiKeyToken")
        assert settings.has_api_key() is False
        with pytest.raises(ConfigurationMissingError):
            settings.require_api_key()

    def test_require_api_key(self):
        assert Settings(api_key="real").require_api_key() == "real"

    @pytest.mark.parametrize(
        ("variable", "value"),
        [
            ("BURNLEDGER_INTEGRITY_POLICY", "sometimes"),
            ("BURNLEDGER_PAGE_SIZE", "lots"),
            ("BURNLEDGER_PAGE_SIZE", "0"),
            ("BURNLEDGER_REQUEST_TIMEOUT", "-1"),
        ],
    )
    def test_invalid_environment_value(self, monkeypatch, variable, value):
        monkeypatch.setenv(variable, value)
        with pytest.raises(InvalidConfigurationError) as exc_info:
            Settings.from_env()
        assert exc_info.value.setting == variable
        assert variable in str(exc_info.value)
