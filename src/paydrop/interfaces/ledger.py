"""LedgerIndex protocol - reads UTxOs and transaction inputs from an indexer."""

from __future__ import annotations

from typing import Protocol

from paydrop.models.deposits import Deposit, TxInput


class LedgerIndex(Protocol):
    """Eventually consistent view of the ledger.

    May return the same deposit across many polls. Raises LedgerIndexError
    on transport or API failure.
    """

    async def list_recent_deposits(self, address: str, count: int = 100) -> list[Deposit]:
        """Newest-first page of UTxOs sitting at ``address``."""
        ...

    async def get_transaction_inputs(self, tx_hash: str) -> list[TxInput]:
        """Inputs of ``tx_hash`` in ledger order."""
        ...
