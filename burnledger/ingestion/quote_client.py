"""Client for the upstream quote API (CoinGecko simple price)."""

import requests
from pydantic import BaseModel

from burnledger.constants import QUOTE_API_URL, QUOTE_ASSET_ID
from burnledger.exceptions import UpstreamMalformedError, UpstreamRateLimitedError, UpstreamUnavailableError
from burnledger.ingestion.retry import RetryPolicy

SOURCE = "quote"


class Quote(BaseModel):
    price: float
    price_change_24h: float = 0.0


class QuoteClient:
    def __init__(
        self,
        session: requests.Session | None = None,
        retry: RetryPolicy | None = None,
        timeout: float = 10.0,
        base_url: str = QUOTE_API_URL,
    ):
        self.session = session or requests.Session()
        self.retry = retry or RetryPolicy()
        self.timeout = timeout
        self.base_url = base_url

    def _fetch(self, asset_id: str) -> Quote:
        try:
            response = self.session.get(
                self.base_url,
                params={
                    "ids": asset_id,
                    "vs_currencies": "usd",
                    "include_24hr_change": "true",
                },
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            if response.status_code == 429:
                raise UpstreamRateLimitedError(SOURCE, "HTTP 429 Too Many Requests")
            response.raise_for_status()
            payload = response.json()
        except ValueError as exc:
            # requests' JSONDecodeError is also a RequestException
            raise UpstreamMalformedError(SOURCE, "response body is not JSON") from exc
        except requests.RequestException as exc:
            raise UpstreamUnavailableError(SOURCE, str(exc)) from exc

        entry = payload.get(asset_id) if isinstance(payload, dict) else None
        if not isinstance(entry, dict):
            raise UpstreamMalformedError(SOURCE, f"no quote for {asset_id}")
        price = entry.get("usd")
        if not isinstance(price, (int, float)) or price <= 0:
            raise UpstreamMalformedError(SOURCE, f"invalid price {price!r}")
        return Quote(price=price, price_change_24h=entry.get("usd_24h_change") or 0.0)

    def get_quote(self, asset_id: str = QUOTE_ASSET_ID) -> Quote:
        """Spot USD price and 24h change for one asset."""
        return self.retry.call(lambda: self._fetch(asset_id), f"quote {asset_id}")
