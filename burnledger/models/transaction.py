"""Canonical burn transaction model."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from burnledger.constants import (
    DEFAULT_TOKEN_DECIMALS,
    DEFAULT_TOKEN_NAME,
    DEFAULT_TOKEN_SYMBOL,
)
from burnledger.exceptions import LockedTransactionError


class Transaction(BaseModel):
    """A single transfer into a sink address.

    The lock is a one-way transition: once ``locked`` is set, every further
    attribute assignment raises ``LockedTransactionError``.
    """

    model_config = ConfigDict(populate_by_name=True)

    hash: str
    from_address: str = Field(alias="from")
    to: str
    raw_amount: str
    token_decimals: int = Field(default=DEFAULT_TOKEN_DECIMALS, ge=0)
    token_name: str = DEFAULT_TOKEN_NAME
    token_symbol: str = DEFAULT_TOKEN_SYMBOL
    timestamp: int
    block_number: int = Field(ge=0)
    first_seen: float = 0.0
    validated: bool = False
    locked: bool = False

    @field_validator("raw_amount")
    @classmethod
    def _positive_integer_string(cls, value: str) -> str:
        value = value.strip()
        if not (value.isascii() and value.isdigit()) or int(value) <= 0:
            raise ValueError(f"raw_amount must be a positive integer string, got {value!r}")
        return str(int(value))

    def __setattr__(self, name: str, value) -> None:
        if self.__dict__.get("locked") and name in type(self).model_fields:
            raise LockedTransactionError(self.hash)
        super().__setattr__(name, value)

    @property
    def amount(self) -> Decimal:
        """Amount in whole tokens."""
        return Decimal(self.raw_amount).scaleb(-self.token_decimals)

    def to_public(self) -> dict:
        """Record in the upstream field layout, without local bookkeeping fields."""
        return {
            "hash": self.hash,
            "from": self.from_address,
            "to": self.to,
            "value": self.raw_amount,
            "timeStamp": str(self.timestamp),
            "blockNumber": str(self.block_number),
            "tokenName": self.token_name,
            "tokenSymbol": self.token_symbol,
            "tokenDecimal": str(self.token_decimals),
        }

    def lock(self) -> bool:
        """Lock this transaction. Returns True if it was unlocked before."""
        if self.locked:
            return False
        self.validated = True
        self.locked = True
        return True
