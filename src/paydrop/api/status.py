"""Status query - read-only view of the Entitlement Ledger."""

from __future__ import annotations

from paydrop.interfaces.store import StateStore
from paydrop.models.records import EntitlementStatus


class StatusQuery:
    """Answers "what happened to this stake key?" without writing anything."""

    def __init__(self, store: StateStore) -> None:
        self._store = store

    async def lookup(self, identity: str) -> EntitlementStatus:
        record = await self._store.get_entitlement(identity)
        if record is None:
            return EntitlementStatus(status="none")
        if not record.fulfilled:
            return EntitlementStatus(status="paid", paid_tx=record.paid_tx)
        return EntitlementStatus(
            status="minted",
            paid_tx=record.paid_tx,
            minted_tx=record.fulfillment_tx,
            asset=record.asset_name,
        )
