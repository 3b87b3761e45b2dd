"""Tests for the quote API client."""

from unittest.mock import MagicMock

import pytest
import requests

from burnledger.exceptions import (
    UpstreamMalformedError,
    UpstreamRateLimitedError,
    UpstreamUnavailableError,
)
from burnledger.ingestion.quote_client import QuoteClient
from burnledger.ingestion.retry import RetryPolicy


def _client(session, sleep) -> QuoteClient:
    return QuoteClient(session=session, retry=RetryPolicy(sleep=sleep))


class TestQuoteClient:
    def test_parses_quote(self, make_response, no_sleep):
        session = MagicMock()
        session.get.return_value = make_response(
            {"shiba-inu": {"usd": 0.00000812, "usd_24h_change": -2.5}}
        )
        quote = _client(session, no_sleep).get_quote()

        assert quote.price == pytest.approx(0.00000812)
        assert quote.price_change_24h == pytest.approx(-2.5)
        params = session.get.call_args.kwargs["params"]
        assert params["ids"] == "shiba-inu"
        assert params["vs_currencies"] == "usd"
        assert params["include_24hr_change"] == "true"

    def test_missing_change_defaults_to_zero(self, make_response, no_sleep):
        session = MagicMock()
        session.get.return_value = make_response({"shiba-inu": {"usd": 0.00001}})
        assert _client(session, no_sleep).get_quote().price_change_24h == 0.0

    def test_missing_asset_is_malformed(self, make_response, no_sleep):
        session = MagicMock()
        session.get.return_value = make_response({})
        with pytest.raises(UpstreamMalformedError):
            _client(session, no_sleep).get_quote()

    def test_zero_price_is_malformed(self, make_response, no_sleep):
        session = MagicMock()
        session.get.return_value = make_response({"shiba-inu": {"usd": 0}})
        with pytest.raises(UpstreamMalformedError):
            _client(session, no_sleep).get_quote()

    def test_http_429_is_rate_limited(self, make_response, no_sleep):
        session = MagicMock()
        session.get.return_value = make_response(status_code=429)
        with pytest.raises(UpstreamRateLimitedError):
            _client(session, no_sleep).get_quote()
        assert session.get.call_count == 3

    def test_network_failure_is_unavailable(self, no_sleep):
        session = MagicMock()
        session.get.side_effect = requests.Timeout("timed out")
        with pytest.raises(UpstreamUnavailableError):
            _client(session, no_sleep).get_quote()

    def test_non_json_is_malformed(self, make_response, no_sleep):
        session = MagicMock()
        session.get.return_value = make_response(json_error=True)
        with pytest.raises(UpstreamMalformedError):
            _client(session, no_sleep).get_quote()
