"""Payer resolver - attributes a payment to a staking credential."""

from __future__ import annotations

import logging

from paydrop.errors import LedgerIndexError, ResolutionError
from paydrop.interfaces.credentials import CredentialDeriver
from paydrop.interfaces.ledger import LedgerIndex
from paydrop.models.records import PayerResolution

log = logging.getLogger(__name__)


class PayerResolver:
    """Resolves the payer of a transaction from its inputs.

    The payer is the address of the *first* input. That is a fixed
    convention, not proof of who paid: a multi-input transaction can
    attribute the payment to any address it spends from.
    """

    def __init__(self, ledger: LedgerIndex, credentials: CredentialDeriver) -> None:
        self._ledger = ledger
        self._credentials = credentials

    async def resolve(self, tx_hash: str) -> PayerResolution:
        """Return the payer address and identity for ``tx_hash``.

        Raises ResolutionError on collaborator failure so the caller can
        retry on a later scan.
        """
        try:
            inputs = await self._ledger.get_transaction_inputs(tx_hash)
        except LedgerIndexError as exc:
            log.warning("Input lookup failed for %s: %s", tx_hash, exc)
            raise ResolutionError(f"input lookup failed for {tx_hash}: {exc}") from exc

        if not inputs or not inputs[0].address:
            log.warning("No payer address found for tx %s", tx_hash)
            return PayerResolution(address=None, identity=None)

        address = inputs[0].address
        identity = self._credentials.staking_credential(address)
        if identity is None:
            log.warning("No stake credential on payer address %s (tx %s)", address[:24], tx_hash)
        return PayerResolution(address=address, identity=identity)
