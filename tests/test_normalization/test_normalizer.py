"""Tests for TransactionNormalizer."""

import pytest

from burnledger.constants import SINK_ADDRESSES
from burnledger.normalization.transactions import TransactionNormalizer

BA1 = SINK_ADDRESSES["BA-1"]


@pytest.fixture
def normalizer(clock):
    return TransactionNormalizer(clock=clock)


class TestNormalize:
    def test_valid_record(self, normalizer, raw_record, now):
        tx = normalizer.normalize(raw_record(tx_hash="0xABC", block=123, timestamp=1_650_000_000))

        assert tx is not None
        assert tx.hash == "0xabc"
        assert tx.to == BA1
        assert tx.raw_amount == "1000000000000000000"
        assert tx.block_number == 123
        assert tx.timestamp == 1_650_000_000
        assert tx.first_seen == now
        assert tx.validated is False
        assert tx.locked is False

    def test_addresses_lowercased(self, normalizer, raw_record):
        tx = normalizer.normalize(raw_record(to=BA1.upper().replace("0X", "0x"), **{"from": "0xAAAA"}))
        assert tx.to == BA1
        assert tx.from_address == "0xaaaa"

    def test_fills_token_defaults(self, normalizer, raw_record):
        record = raw_record()
        for key in ("tokenName", "tokenSymbol", "tokenDecimal"):
            record.pop(key)
        tx = normalizer.normalize(record)

        assert tx.token_name == "SHIBA INU"
        assert tx.token_symbol == "SHIB"
        assert tx.token_decimals == 18

    @pytest.mark.parametrize("decimals", [0, "0"])
    def test_keeps_zero_decimals(self, normalizer, raw_record, decimals):
        tx = normalizer.normalize(raw_record(tokenDecimal=decimals))
        assert tx.token_decimals == 0

    @pytest.mark.parametrize("decimals", [None, ""])
    def test_empty_decimals_use_default(self, normalizer, raw_record, decimals):
        tx = normalizer.normalize(raw_record(tokenDecimal=decimals))
        assert tx.token_decimals == 18

    @pytest.mark.parametrize("value", ["0", "", "-5", "1.5", "abc", "²", "١٢٣"])
    def test_rejects_bad_value(self, normalizer, raw_record, value):
        assert normalizer.normalize(raw_record(value=value)) is None

    def test_superscript_value_reported_as_unparsable(self, normalizer, raw_record):
        accepted, rejected = normalizer.normalize_many([raw_record("0x1", value="²")])
        assert accepted == []
        assert "unparsable value" in rejected[0]

    @pytest.mark.parametrize("field", ["hash", "blockNumber", "timeStamp", "to"])
    def test_rejects_missing_field(self, normalizer, raw_record, field):
        record = raw_record()
        record.pop(field)
        assert normalizer.normalize(record) is None

    def test_rejects_non_sink_recipient(self, normalizer, raw_record):
        record = raw_record(to="0x2222222222222222222222222222222222222222")
        assert normalizer.normalize(record) is None

    def test_rejects_unparsable_block(self, normalizer, raw_record):
        record = raw_record()
        record["blockNumber"] = "latest"
        assert normalizer.normalize(record) is None


class TestNormalizeMany:
    def test_splits_accepted_and_rejected(self, normalizer, raw_record):
        raws = [
            raw_record("0x1"),
            raw_record("0x2", value="0"),
            raw_record("0x3", to="0x2222222222222222222222222222222222222222"),
            raw_record("0x4"),
        ]
        accepted, rejected = normalizer.normalize_many(raws)

        assert [tx.hash for tx in accepted] == ["0x1", "0x4"]
        assert len(rejected) == 2
        assert rejected[0].startswith("0x2:")
