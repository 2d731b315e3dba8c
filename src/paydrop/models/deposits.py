"""Ledger observations deserialized from the indexer."""

from __future__ import annotations

from dataclasses import dataclass

LOVELACE = "lovelace"


@dataclass(frozen=True)
class AmountEntry:
    """One (unit, quantity) pair of a UTxO value."""

    unit: str  # "lovelace" or policy_id + asset_name hex
    quantity: int


@dataclass(frozen=True)
class Deposit:
    """An unspent output observed at the watched address.

    Never mutated; the reconciler only ever marks it seen.
    """

    tx_hash: str
    output_index: int
    amount: tuple[AmountEntry, ...]

    @property
    def deposit_id(self) -> str:
        return f"{self.tx_hash}#{self.output_index}"


@dataclass(frozen=True)
class TxInput:
    """One input of a transaction, as reported by the indexer."""

    address: str | None
    tx_hash: str | None = None
    output_index: int | None = None
