"""Cardano integration components."""

from paydrop.cardano.blockfrost import BlockfrostLedgerIndex
from paydrop.cardano.credentials import PyCardanoCredentials
from paydrop.cardano.issuer import CardanoAssetIssuer
from paydrop.cardano.wallet import ServerWallet, load_wallet

__all__ = [
    "BlockfrostLedgerIndex",
    "PyCardanoCredentials",
    "CardanoAssetIssuer",
    "ServerWallet",
    "load_wallet",
]
