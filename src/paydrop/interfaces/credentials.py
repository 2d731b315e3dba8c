"""CredentialDeriver protocol - extracts credentials from ledger addresses."""

from __future__ import annotations

from typing import Protocol


class CredentialDeriver(Protocol):
    """Derives credential hashes from bech32 addresses."""

    def staking_credential(self, address: str) -> str | None:
        """Staking credential hash (hex), or None if absent or unparseable."""
        ...

    def spending_credential(self, address: str) -> str:
        """Payment key hash (hex). Raises ConfigError if not derivable."""
        ...
