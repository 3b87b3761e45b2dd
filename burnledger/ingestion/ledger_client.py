"""Client for the upstream ledger-query API (Etherscan-compatible).

All calls are sequential. A fixed delay separates consecutive requests, and
every request goes through the shared RetryPolicy.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

import requests

from burnledger.constants import (
    LEDGER_API_URL,
    OPEN_END_BLOCK,
    START_BLOCK,
    TOKEN_CONTRACT_ADDRESS,
)
from burnledger.exceptions import (
    ConfigurationMissingError,
    UpstreamError,
    UpstreamMalformedError,
    UpstreamRateLimitedError,
    UpstreamUnavailableError,
)
from burnledger.ingestion.retry import RetryPolicy

logger = logging.getLogger(__name__)

SOURCE = "ledger"


@dataclass(frozen=True)
class BlockRange:
    start: int = START_BLOCK
    end: int = OPEN_END_BLOCK


@dataclass
class FetchResult:
    """Records gathered for one address, plus the error that stopped the loop, if any."""

    address: str
    records: list[dict] = field(default_factory=list)
    pages: int = 0
    error: str | None = None


def _status_detail(payload: dict) -> str:
    message = str(payload.get("message") or "")
    result = payload.get("result")
    if isinstance(result, str):
        message = f"{message} {result}".strip()
    return message


def _check_status(payload: dict) -> bool:
    """Classify a status-0 response. Returns True when it means "no results"."""
    if str(payload.get("status", "")) != "0":
        return False
    detail = _status_detail(payload)
    lowered = detail.lower()
    if "no transactions found" in lowered or "no records found" in lowered:
        return True
    if "rate limit" in lowered:
        raise UpstreamRateLimitedError(SOURCE, detail)
    raise UpstreamMalformedError(SOURCE, f"status 0: {detail or 'no message'}")


def _transfer_records(payload: dict) -> list[dict]:
    if _check_status(payload):
        return []
    result = payload.get("result")
    if not isinstance(result, list):
        raise UpstreamMalformedError(SOURCE, f"expected a list of transfers, got {type(result).__name__}")
    return result


def _proxy_result(payload: dict) -> Any:
    # Proxy endpoints report rate limits with the account-style envelope.
    if "status" in payload:
        _check_status(payload)
    if "error" in payload:
        raise UpstreamMalformedError(SOURCE, f"proxy error: {payload['error']}")
    return payload.get("result")


class LedgerClient:
    """Paginated, rate-limit-aware reads of token transfers into sink addresses."""

    def __init__(
        self,
        api_key: str | None,
        session: requests.Session | None = None,
        retry: RetryPolicy | None = None,
        request_delay: float = 1.0,
        timeout: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
        base_url: str = LEDGER_API_URL,
        contract_address: str = TOKEN_CONTRACT_ADDRESS,
    ):
        if not api_key:
            raise ConfigurationMissingError("ETHERSCAN_API_KEY")
        self._api_key = api_key
        self.session = session or requests.Session()
        self.retry = retry or RetryPolicy(sleep=sleep)
        self.request_delay = request_delay
        self.timeout = timeout
        self.base_url = base_url
        self.contract_address = contract_address
        self._sleep = sleep
        self._calls = 0

    def _pace(self) -> None:
        if self._calls and self.request_delay > 0:
            self._sleep(self.request_delay)
        self._calls += 1

    def _get(self, params: dict) -> dict:
        self._pace()
        try:
            response = self.session.get(
                self.base_url,
                params={**params, "apikey": self._api_key},
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise UpstreamUnavailableError(SOURCE, str(exc)) from exc
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamMalformedError(SOURCE, "response body is not JSON") from exc
        if not isinstance(payload, dict):
            raise UpstreamMalformedError(SOURCE, "response body is not a JSON object")
        return payload

    def _request(self, params: dict, parse: Callable[[dict], Any], description: str) -> Any:
        return self.retry.call(lambda: parse(self._get(params)), description)

    def fetch_page(
        self,
        address: str,
        page: int,
        page_size: int,
        block_range: BlockRange | None = None,
    ) -> list[dict]:
        """Fetch one page of token transfers for an address, newest first."""
        block_range = block_range or BlockRange()
        params = {
            "module": "account",
            "action": "tokentx",
            "contractaddress": self.contract_address,
            "address": address,
            "page": page,
            "offset": page_size,
            "startblock": block_range.start,
            "endblock": block_range.end,
            "sort": "desc",
        }
        return self._request(params, _transfer_records, f"tokentx {address} page {page}")

    def fetch_all(
        self,
        address: str,
        page_size: int = 1000,
        block_range: BlockRange | None = None,
    ) -> FetchResult:
        """Walk pages until a short or empty page.

        A page that still fails after the retry cap ends the walk; whatever was
        gathered so far is returned with the error recorded.
        """
        result = FetchResult(address=address)
        page = 1
        while True:
            try:
                records = self.fetch_page(address, page, page_size, block_range)
            except UpstreamError as exc:
                logger.error("Stopping collection for %s at page %d: %s", address, page, exc)
                result.error = str(exc)
                break
            result.pages += 1
            result.records.extend(records)
            logger.info(
                "%s page %d: %d records (%d total)",
                address, page, len(records), len(result.records),
            )
            if len(records) < page_size:
                break
            page += 1
        return result

    def get_block_number(self) -> int:
        """Latest block number known to the upstream source."""

        def parse(payload: dict) -> int:
            result = _proxy_result(payload)
            if not isinstance(result, str):
                raise UpstreamMalformedError(SOURCE, "eth_blockNumber returned no result")
            try:
                return int(result, 16)
            except ValueError as exc:
                raise UpstreamMalformedError(SOURCE, f"invalid block number {result!r}") from exc

        params = {"module": "proxy", "action": "eth_blockNumber"}
        return self._request(params, parse, "eth_blockNumber")

    def get_transaction(self, tx_hash: str) -> dict | None:
        """Look up a transaction by hash. Returns None if upstream does not know it."""

        def parse(payload: dict) -> dict | None:
            result = _proxy_result(payload)
            if result is None:
                return None
            if not isinstance(result, dict):
                raise UpstreamMalformedError(SOURCE, "eth_getTransactionByHash returned a non-object")
            return result

        params = {"module": "proxy", "action": "eth_getTransactionByHash", "txhash": tx_hash}
        return self._request(params, parse, f"eth_getTransactionByHash {tx_hash}")

    def get_token_balance(self, address: str) -> int:
        """Raw token balance (smallest unit) held by an address."""

        def parse(payload: dict) -> int:
            _check_status(payload)
            result = payload.get("result")
            if not isinstance(result, str) or not (result.isascii() and result.isdigit()):
                raise UpstreamMalformedError(SOURCE, f"invalid token balance {result!r}")
            return int(result)

        params = {
            "module": "account",
            "action": "tokenbalance",
            "contractaddress": self.contract_address,
            "address": address,
            "tag": "latest",
        }
        return self._request(params, parse, f"tokenbalance {address}")
