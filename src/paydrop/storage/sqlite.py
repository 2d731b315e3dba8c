"""SQLite implementation of the StateStore protocol."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from paydrop.models.records import (
    ActivityRecord,
    ClaimOutcome,
    EntitlementRecord,
    MarkOutcome,
)

log = logging.getLogger(__name__)

SCHEMA = """
-- Entitlement Ledger: one row per payer identity
CREATE TABLE IF NOT EXISTS entitlements (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    identity TEXT NOT NULL UNIQUE,
    payer_address TEXT NOT NULL,
    paid_tx TEXT NOT NULL UNIQUE,
    fulfillment_tx TEXT,
    asset_name TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    fulfilled_at TEXT
);
CREATE INDEX IF NOT EXISTS idx_entitlements_pending
    ON entitlements(fulfillment_tx) WHERE fulfillment_tx IS NULL;

-- Seen-Set: every deposit already examined
CREATE TABLE IF NOT EXISTS seen_deposits (
    deposit_id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Activity log
CREATE TABLE IF NOT EXISTS activity_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    event_type TEXT NOT NULL,
    identity TEXT,
    tx_hash TEXT,
    amount INTEGER,
    message TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_activity_created ON activity_log(created_at);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteStateStore:
    """SQLite-backed implementation of the StateStore protocol.

    Duplicate detection relies on the UNIQUE constraints above; callers
    never pre-check before writing.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA journal_mode=WAL")
        await self._db.executescript(SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    # ── Seen-Set ───────────────────────────────────────────

    async def is_seen(self, deposit_id: str) -> bool:
        async with self.db.execute(
            "SELECT 1 FROM seen_deposits WHERE deposit_id=?", (deposit_id,)
        ) as cur:
            return await cur.fetchone() is not None

    async def mark_seen(self, deposit_id: str) -> bool:
        cur = await self.db.execute(
            "INSERT OR IGNORE INTO seen_deposits (deposit_id, created_at) VALUES (?, ?)",
            (deposit_id, _now()),
        )
        await self.db.commit()
        return cur.rowcount == 1

    async def count_seen(self) -> int:
        async with self.db.execute("SELECT COUNT(*) AS c FROM seen_deposits") as cur:
            row = await cur.fetchone()
            return row["c"] if row else 0

    # ── Entitlement Ledger ─────────────────────────────────

    async def claim(
        self, identity: str, payer_address: str, paid_tx: str
    ) -> ClaimOutcome:
        cur = await self.db.execute(
            "INSERT OR IGNORE INTO entitlements"
            " (identity, payer_address, paid_tx, created_at)"
            " VALUES (?, ?, ?, ?)",
            (identity, payer_address, paid_tx, _now()),
        )
        await self.db.commit()
        if cur.rowcount == 1:
            return ClaimOutcome.CLAIMED
        return ClaimOutcome.ALREADY_CLAIMED

    async def mark_fulfilled(
        self, identity: str, fulfillment_tx: str, asset_name: str
    ) -> MarkOutcome:
        cur = await self.db.execute(
            "UPDATE entitlements SET fulfillment_tx=?, asset_name=?, fulfilled_at=?"
            " WHERE identity=? AND fulfillment_tx IS NULL",
            (fulfillment_tx, asset_name, _now(), identity),
        )
        await self.db.commit()
        if cur.rowcount == 1:
            return MarkOutcome.MARKED

        record = await self.get_entitlement(identity)
        if record is None:
            return MarkOutcome.NOT_CLAIMED
        if record.fulfillment_tx == fulfillment_tx:
            return MarkOutcome.ALREADY_MARKED
        log.warning(
            "Refusing to overwrite fulfillment for %s: stored=%s offered=%s",
            identity, record.fulfillment_tx, fulfillment_tx,
        )
        return MarkOutcome.CONFLICT

    async def get_entitlement(self, identity: str) -> EntitlementRecord | None:
        async with self.db.execute(
            "SELECT * FROM entitlements WHERE identity=?", (identity,)
        ) as cur:
            row = await cur.fetchone()
            return _row_to_entitlement(row) if row else None

    async def get_pending_entitlements(self) -> list[EntitlementRecord]:
        async with self.db.execute(
            "SELECT * FROM entitlements WHERE fulfillment_tx IS NULL ORDER BY id"
        ) as cur:
            return [_row_to_entitlement(row) async for row in cur]

    async def get_all_entitlements(self) -> list[EntitlementRecord]:
        async with self.db.execute("SELECT * FROM entitlements ORDER BY id") as cur:
            return [_row_to_entitlement(row) async for row in cur]

    # ── Activity log ───────────────────────────────────────

    async def log_activity(
        self,
        event_type: str,
        message: str,
        identity: str | None = None,
        tx_hash: str | None = None,
        amount: int | None = None,
    ) -> None:
        await self.db.execute(
            "INSERT INTO activity_log (event_type, identity, tx_hash, amount, message, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?)",
            (event_type, identity, tx_hash, amount, message, _now()),
        )
        await self.db.commit()

    async def get_recent_activity(self, limit: int = 50) -> list[ActivityRecord]:
        async with self.db.execute(
            "SELECT * FROM activity_log ORDER BY id DESC LIMIT ?", (limit,)
        ) as cur:
            return [
                ActivityRecord(
                    id=row["id"],
                    event_type=row["event_type"],
                    identity=row["identity"],
                    tx_hash=row["tx_hash"],
                    amount=row["amount"],
                    message=row["message"],
                    created_at=row["created_at"],
                )
                async for row in cur
            ]


# ── Row converters ─────────────────────────────────────────


def _row_to_entitlement(row: aiosqlite.Row) -> EntitlementRecord:
    return EntitlementRecord(
        identity=row["identity"],
        payer_address=row["payer_address"],
        paid_tx=row["paid_tx"],
        fulfillment_tx=row["fulfillment_tx"],
        asset_name=row["asset_name"],
        created_at=row["created_at"],
        fulfilled_at=row["fulfilled_at"],
    )
