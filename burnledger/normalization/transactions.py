"""Raw upstream transfer records to canonical Transactions."""

import logging
import time
from typing import Callable

from pydantic import ValidationError

from burnledger.constants import (
    DEFAULT_TOKEN_DECIMALS,
    DEFAULT_TOKEN_NAME,
    DEFAULT_TOKEN_SYMBOL,
    sink_address_set,
)
from burnledger.models.transaction import Transaction

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("hash", "to", "value", "timeStamp", "blockNumber")


class TransactionNormalizer:
    """Validates raw transfer records and fills token metadata defaults.

    Records are rejected when a required field is missing, the value is not a
    positive integer, or the recipient is not a sink address.
    """

    def __init__(
        self,
        sink_addresses: set[str] | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.sink_addresses = {a.lower() for a in (sink_addresses or sink_address_set())}
        self.clock = clock

    def normalize(self, raw: dict) -> Transaction | None:
        """Return a Transaction, or None if the record is rejected."""
        transaction, reason = self._normalize(raw)
        if transaction is None:
            logger.debug("Rejected record %s: %s", raw.get("hash", "<no hash>"), reason)
        return transaction

    def normalize_many(self, raws: list[dict]) -> tuple[list[Transaction], list[str]]:
        """Normalize a batch. Returns accepted transactions and rejection reasons."""
        accepted: list[Transaction] = []
        rejected: list[str] = []
        for raw in raws:
            transaction, reason = self._normalize(raw)
            if transaction is None:
                rejected.append(f"{raw.get('hash', '<no hash>')}: {reason}")
            else:
                accepted.append(transaction)
        if rejected:
            logger.debug("Rejected %d of %d records", len(rejected), len(raws))
        return accepted, rejected

    def _normalize(self, raw: dict) -> tuple[Transaction | None, str]:
        if not isinstance(raw, dict):
            return None, "record is not an object"
        missing = [name for name in _REQUIRED_FIELDS if raw.get(name) in (None, "")]
        if missing:
            return None, f"missing fields: {', '.join(missing)}"

        value = str(raw["value"]).strip()
        # str.isdigit() also accepts digits int() refuses, such as superscripts.
        if not (value.isascii() and value.isdigit()):
            return None, f"unparsable value {value!r}"
        if int(value) <= 0:
            return None, "non-positive value"

        to_address = str(raw["to"]).lower()
        if to_address not in self.sink_addresses:
            return None, f"recipient {to_address} is not a sink address"

        decimals = raw.get("tokenDecimal")
        if decimals in (None, ""):
            decimals = DEFAULT_TOKEN_DECIMALS

        try:
            transaction = Transaction(
                hash=str(raw["hash"]).lower(),
                from_address=str(raw.get("from") or "").lower(),
                to=to_address,
                raw_amount=value,
                token_decimals=int(decimals),
                token_name=raw.get("tokenName") or DEFAULT_TOKEN_NAME,
                token_symbol=raw.get("tokenSymbol") or DEFAULT_TOKEN_SYMBOL,
                timestamp=int(raw["timeStamp"]),
                block_number=int(raw["blockNumber"]),
                first_seen=self.clock(),
            )
        except (ValueError, TypeError, ValidationError) as exc:
            return None, f"invalid field: {exc}"
        return transaction, ""
