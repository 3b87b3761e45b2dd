"""BurnLedger: historical token-burn tracking with integrity validation."""

__version__ = "0.1.0"
