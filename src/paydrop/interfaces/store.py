"""StateStore protocol - durable Seen-Set, Entitlement Ledger and activity log."""

from __future__ import annotations

from typing import Protocol

from paydrop.models.records import (
    ActivityRecord,
    ClaimOutcome,
    EntitlementRecord,
    MarkOutcome,
)


class StateStore(Protocol):
    """Every cross-scan decision is answered by this store's constraints."""

    # ── Lifecycle ──────────────────────────────────────────

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        ...

    async def close(self) -> None:
        """Close the database connection."""
        ...

    # ── Seen-Set ───────────────────────────────────────────

    async def is_seen(self, deposit_id: str) -> bool:
        ...

    async def mark_seen(self, deposit_id: str) -> bool:
        """Record ``deposit_id`` as examined. Returns False if already present."""
        ...

    # ── Entitlement Ledger ─────────────────────────────────

    async def claim(
        self, identity: str, payer_address: str, paid_tx: str
    ) -> ClaimOutcome:
        """Atomically create a pending entitlement for ``identity``."""
        ...

    async def mark_fulfilled(
        self, identity: str, fulfillment_tx: str, asset_name: str
    ) -> MarkOutcome:
        """Move a pending entitlement to fulfilled. Idempotent."""
        ...

    async def get_entitlement(self, identity: str) -> EntitlementRecord | None:
        ...

    async def get_pending_entitlements(self) -> list[EntitlementRecord]:
        ...

    # ── Activity log ───────────────────────────────────────

    async def log_activity(
        self,
        event_type: str,
        message: str,
        identity: str | None = None,
        tx_hash: str | None = None,
        amount: int | None = None,
    ) -> None:
        ...

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        ...
