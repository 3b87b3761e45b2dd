"""Shared test fixtures for BurnLedger."""

from unittest.mock import MagicMock

import pytest
import requests

from burnledger.constants import SINK_ADDRESSES
from burnledger.db.repository import DatasetRepository
from burnledger.db.schema import create_schema
from burnledger.models.transaction import Transaction

# 2023-11-14T22:13:20Z
NOW = 1_700_000_000.0

BA1 = SINK_ADDRESSES["BA-1"]


@pytest.fixture
def now() -> float:
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def no_sleep():
    return MagicMock()


@pytest.fixture
def db_conn(tmp_path):
    conn = create_schema(tmp_path / "test.db")
    yield conn
    conn.close()


@pytest.fixture
def repo(db_conn) -> DatasetRepository:
    return DatasetRepository(db_conn)


@pytest.fixture
def raw_record():
    """Factory for upstream transfer records."""

    def _make(
        tx_hash: str = "0xabc",
        to: str = BA1,
        value: str = "1000000000000000000",
        timestamp: int = int(NOW) - 3600,
        block: int = 18_000_000,
        **extra,
    ) -> dict:
        record = {
            "hash": tx_hash,
            "from": "0x1111111111111111111111111111111111111111",
            "to": to,
            "value": value,
            "timeStamp": str(timestamp),
            "blockNumber": str(block),
            "tokenName": "SHIBA INU",
            "tokenSymbol": "SHIB",
            "tokenDecimal": "18",
        }
        record.update(extra)
        return record

    return _make


@pytest.fixture
def make_tx():
    """Factory for canonical transactions."""

    def _make(
        tx_hash: str = "0xabc",
        to: str = BA1,
        raw_amount: str = "1000000000000000000",
        timestamp: int = int(NOW) - 3600,
        block: int = 18_000_000,
        **extra,
    ) -> Transaction:
        return Transaction(
            hash=tx_hash,
            from_address="0x1111111111111111111111111111111111111111",
            to=to,
            raw_amount=raw_amount,
            timestamp=timestamp,
            block_number=block,
            first_seen=NOW,
            **extra,
        )

    return _make


@pytest.fixture
def make_response():
    """Factory for mocked ``requests`` responses."""

    def _make(payload=None, status_code: int = 200, json_error: bool = False):
        response = MagicMock()
        response.status_code = status_code
        if json_error:
            response.json.side_effect = ValueError("Expecting value")
        else:
            response.json.return_value = payload
        if status_code >= 400:
            response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Server Error")
        else:
            response.raise_for_status.return_value = None
        return response

    return _make
