"""Exception types raised across component boundaries."""

from __future__ import annotations


class PaydropError(Exception):
    """Base class for paydrop errors."""


class ConfigError(PaydropError):
    """Startup or configuration failure. Fatal."""


class LedgerIndexError(PaydropError):
    """Transport or API failure talking to the ledger indexer."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResolutionError(PaydropError):
    """Payer could not be resolved yet. Retryable on a later scan."""
