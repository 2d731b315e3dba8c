"""Protocol interfaces for all paydrop components."""

from paydrop.interfaces.ledger import LedgerIndex
from paydrop.interfaces.credentials import CredentialDeriver
from paydrop.interfaces.issuer import AssetIssuer
from paydrop.interfaces.store import StateStore

__all__ = [
    "LedgerIndex",
    "CredentialDeriver",
    "AssetIssuer",
    "StateStore",
]
