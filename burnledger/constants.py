"""Fixed domain constants: token contract, sink addresses, upstream endpoints."""

from datetime import datetime, timezone

TOKEN_CONTRACT_ADDRESS = "0x95ad61b0a150d79219dcf64e1e6cc01f0b64c4ce"

# Destination addresses whose inbound transfers count as burns.
SINK_ADDRESSES: dict[str, str] = {
    "BA-1": "0xdead000000000000000042069420694206942069",
    "BA-2": "0x000000000000000000000000000000000000dead",
    "BA-3": "0x0000000000000000000000000000000000000000",
    "CA": "0x95ad61b0a150d79219dcf64e1e6cc01f0b64c4ce",
}

# Balance holders summed for the total-burned figure. The original Vitalik
# burn address holds burned supply but is never walked for transfers.
TOTAL_BURNED_ADDRESSES: dict[str, str] = {
    **SINK_ADDRESSES,
    "Vitalik Burn Original": "0xd7b7df10cb1dc2d1d15e7d00bcb244a7cfac61cc",
}

DEFAULT_TOKEN_NAME = "SHIBA INU"
DEFAULT_TOKEN_SYMBOL = "SHIB"
DEFAULT_TOKEN_DECIMALS = 18

# Token launch; earlier timestamps are implausible.
DOMAIN_ORIGIN = datetime(2020, 8, 1, tzinfo=timezone.utc)
DOMAIN_ORIGIN_TIMESTAMP = int(DOMAIN_ORIGIN.timestamp())

LEDGER_API_URL = "https://api.etherscan.io/api"
QUOTE_API_URL = "https://api.coingecko.com/api/v3/simple/price"
QUOTE_ASSET_ID = "shiba-inu"

START_BLOCK = 1
OPEN_END_BLOCK = 99999999

FRESHNESS_WINDOW_SECONDS = 24 * 60 * 60
CROSS_VALIDATION_WINDOW_SECONDS = 48 * 60 * 60
CLOCK_SKEW_TOLERANCE_SECONDS = 60 * 60
VALIDATION_LOG_RETENTION_DAYS = 365
BACKUP_RETENTION_DAYS = 30

PLACEHOLDER_API_KEYS = {"YourApiKeyToken", "YourEtherscanApiKeyHere"}


def sink_address_set() -> set[str]:
    """Lowercased sink addresses for membership checks."""
    return {address.lower() for address in SINK_ADDRESSES.values()}
