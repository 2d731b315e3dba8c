"""Blockfrost ledger index - reads UTxOs and transaction inputs over HTTP."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from paydrop.errors import LedgerIndexError
from paydrop.models.deposits import AmountEntry, Deposit, TxInput

log = logging.getLogger(__name__)


def _parse_utxo(row: dict[str, Any]) -> Deposit:
    """Parse one ``/addresses/{addr}/utxos`` entry.

    ``amount`` looks like [{"unit": "lovelace", "quantity": "5000000"}, ...].
    """
    index = row.get("output_index", row.get("tx_index"))
    return Deposit(
        tx_hash=str(row["tx_hash"]),
        output_index=int(index),
        amount=tuple(
            AmountEntry(unit=str(a["unit"]), quantity=int(a["quantity"]))
            for a in row.get("amount") or []
        ),
    )


def _parse_input(row: dict[str, Any]) -> TxInput:
    index = row.get("output_index")
    return TxInput(
        address=row.get("address") or None,
        tx_hash=row.get("tx_hash"),
        output_index=int(index) if index is not None else None,
    )


class BlockfrostLedgerIndex:
    """Read-only Blockfrost client implementing the LedgerIndex protocol.

    Every transport or API failure surfaces as LedgerIndexError; timeouts
    are enforced by the underlying httpx client.
    """

    def __init__(
        self,
        base_url: str,
        project_id: str,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"project_id": project_id},
            timeout=httpx.Timeout(timeout, connect=10),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            resp = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise LedgerIndexError(f"Blockfrost {path} -> {type(exc).__name__}: {exc}") from exc

        if resp.status_code != 200:
            raise LedgerIndexError(
                f"Blockfrost {path} -> {resp.status_code}: {resp.text[:280]}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise LedgerIndexError(f"Blockfrost {path} -> invalid JSON") from exc

    async def list_recent_deposits(self, address: str, count: int = 100) -> list[Deposit]:
        try:
            rows = await self._get_json(
                f"/addresses/{address}/utxos",
                params={"order": "desc", "count": count},
            )
        except LedgerIndexError as exc:
            # Blockfrost answers 404 for an address that has never been used.
            if exc.status_code == 404:
                return []
            raise

        if not isinstance(rows, list):
            raise LedgerIndexError(f"Malformed UTxO listing for {address[:24]}: expected a list")

        deposits = []
        for row in rows:
            try:
                deposits.append(_parse_utxo(row))
            except (AttributeError, KeyError, TypeError, ValueError) as exc:
                # One bad row must not hold back the rest of the page
                log.warning("Skipping malformed UTxO at %s: %s (%r)", address[:24], exc, row)

        log.debug("Fetched %d UTxOs at %s", len(deposits), address[:24])
        return deposits

    async def get_transaction_inputs(self, tx_hash: str) -> list[TxInput]:
        data = await self._get_json(f"/txs/{tx_hash}/utxos")
        try:
            return [_parse_input(row) for row in (data or {}).get("inputs") or []]
        except (AttributeError, TypeError, ValueError) as exc:
            raise LedgerIndexError(f"Malformed inputs for tx {tx_hash}: {exc}") from exc
