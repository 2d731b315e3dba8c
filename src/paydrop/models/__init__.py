"""Data models for the paydrop daemon."""

from paydrop.models.deposits import LOVELACE, AmountEntry, Deposit, TxInput
from paydrop.models.records import (
    ActivityRecord,
    ClaimOutcome,
    ClassifyResult,
    Design,
    EntitlementRecord,
    EntitlementStatus,
    FulfillmentResult,
    IssueResult,
    MarkOutcome,
    PayerResolution,
    ScanReport,
)
from paydrop.models.config import CardanoNetwork, DropConfig, HttpConfig

__all__ = [
    "LOVELACE", "AmountEntry", "Deposit", "TxInput",
    "ActivityRecord", "ClaimOutcome", "ClassifyResult", "Design",
    "EntitlementRecord", "EntitlementStatus", "FulfillmentResult",
    "IssueResult", "MarkOutcome", "PayerResolution", "ScanReport",
    "CardanoNetwork", "DropConfig", "HttpConfig",
]
