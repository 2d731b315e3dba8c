"""Internal record types for state persistence and operation results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ClaimOutcome(str, Enum):
    """Result of an atomic entitlement claim."""

    CLAIMED = "claimed"
    ALREADY_CLAIMED = "already_claimed"


class MarkOutcome(str, Enum):
    """Result of recording a fulfillment against an entitlement."""

    MARKED = "marked"  # pending -> fulfilled
    ALREADY_MARKED = "already_marked"  # same fulfillment id, no-op
    CONFLICT = "conflict"  # fulfilled with a different id, left untouched
    NOT_CLAIMED = "not_claimed"  # no entitlement for this identity


@dataclass
class EntitlementRecord:
    """One payer identity's claim-and-fulfillment state."""

    identity: str  # staking credential hash (hex)
    payer_address: str
    paid_tx: str
    fulfillment_tx: str | None = None
    asset_name: str | None = None
    created_at: str = ""
    fulfilled_at: str | None = None

    @property
    def fulfilled(self) -> bool:
        return self.fulfillment_tx is not None


@dataclass
class ClassifyResult:
    """Result of deposit evaluation by the DepositClassifier."""

    qualifies: bool
    reason: str  # "accepted", "foreign_assets", "wrong_unit", "wrong_amount", "empty_amount"
    deposit_id: str


@dataclass
class PayerResolution:
    """Payer address and identity derived from a transaction's inputs."""

    address: str | None
    identity: str | None


@dataclass(frozen=True)
class Design:
    """One entry of the fulfillment catalog."""

    name: str
    cid: str
    media_type: str = "image/png"


@dataclass
class IssueResult:
    """Result of a mint-and-send transaction submission."""

    success: bool
    payer_address: str
    asset_name: str
    tx_hash: str | None = None
    error: str | None = None


@dataclass
class FulfillmentResult:
    """Outcome of fulfilling one claimed entitlement."""

    success: bool
    identity: str
    tx_hash: str | None = None
    asset_name: str | None = None
    mark: MarkOutcome | None = None
    error: str | None = None


@dataclass
class ScanReport:
    """Counts for one reconciliation pass."""

    started_at: str = ""
    completed_at: str = ""
    total: int = 0
    skipped_seen: int = 0
    rejected: int = 0
    deferred: int = 0
    no_identity: int = 0
    duplicate: int = 0
    fulfilled: int = 0
    fulfillment_failed: int = 0
    errors: int = 0
    duration_ms: int = 0


@dataclass
class EntitlementStatus:
    """Read-only status of an identity, as served to clients."""

    status: str  # "none" | "paid" | "minted"
    paid_tx: str | None = None
    minted_tx: str | None = None
    asset: str | None = None

    def to_dict(self) -> dict:
        if self.status == "paid":
            return {"status": "paid", "paid_tx": self.paid_tx}
        if self.status == "minted":
            return {"status": "minted", "minted_tx": self.minted_tx, "asset": self.asset}
        return {"status": "none"}


@dataclass
class ActivityRecord:
    """A single activity log entry."""

    id: int
    event_type: str
    identity: str | None
    tx_hash: str | None
    amount: int | None  # lovelace
    message: str
    created_at: str
