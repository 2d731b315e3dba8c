"""Fulfillment invoker - issues the asset for a freshly claimed entitlement."""

from __future__ import annotations

import logging
import random
from typing import Sequence

from paydrop.interfaces.issuer import AssetIssuer
from paydrop.interfaces.store import StateStore
from paydrop.models.records import (
    Design,
    EntitlementRecord,
    FulfillmentResult,
    IssueResult,
    MarkOutcome,
)

log = logging.getLogger(__name__)


class FulfillmentInvoker:
    """Wraps the issuer with the Entitlement Ledger's idempotency.

    A failed issuance leaves the entitlement pending. The claim is not
    released and nothing here retries it; stuck records surface through
    the activity log and ``paydrop pending``.
    """

    def __init__(
        self,
        store: StateStore,
        issuer: AssetIssuer,
        catalog: Sequence[Design],
        rng: random.Random | None = None,
    ) -> None:
        if not catalog:
            raise ValueError("Design catalog is empty")
        self._store = store
        self._issuer = issuer
        self._catalog = list(catalog)
        self._rng = rng or random.Random()

    def pick_design(self) -> Design:
        """Independent uniform choice; designs may repeat across payers."""
        return self._rng.choice(self._catalog)

    async def fulfill(self, record: EntitlementRecord) -> FulfillmentResult:
        if record.fulfilled:
            log.info("Entitlement %s already fulfilled in %s", record.identity, record.fulfillment_tx)
            return FulfillmentResult(
                success=True,
                identity=record.identity,
                tx_hash=record.fulfillment_tx,
                asset_name=record.asset_name,
                mark=MarkOutcome.ALREADY_MARKED,
            )

        design = self.pick_design()
        log.info("Issuing %s to %s (stake %s)", design.name, record.payer_address[:24], record.identity)

        try:
            result = await self._issuer.issue(record.payer_address, design)
        except Exception as exc:
            log.error("Issuer raised for stake %s: %s", record.identity, exc, exc_info=True)
            result = IssueResult(
                success=False,
                payer_address=record.payer_address,
                asset_name=design.name,
                error=str(exc),
            )

        if not result.success or not result.tx_hash:
            error = result.error or "issuer returned no transaction hash"
            log.error("Issuance failed for stake %s (paid_tx %s): %s", record.identity, record.paid_tx, error)
            await self._store.log_activity(
                "issuance_failed",
                f"Issuance failed: {error}",
                identity=record.identity,
                tx_hash=record.paid_tx,
            )
            return FulfillmentResult(
                success=False,
                identity=record.identity,
                asset_name=design.name,
                error=error,
            )

        mark = await self._store.mark_fulfilled(record.identity, result.tx_hash, design.name)
        if mark is not MarkOutcome.MARKED:
            log.warning("mark_fulfilled for %s returned %s", record.identity, mark.value)

        log.info("Minted %s to %s in tx %s", design.name, record.payer_address[:24], result.tx_hash)
        await self._store.log_activity(
            "fulfillment_success",
            f"Minted {design.name}",
            identity=record.identity,
            tx_hash=result.tx_hash,
        )
        return FulfillmentResult(
            success=True,
            identity=record.identity,
            tx_hash=result.tx_hash,
            asset_name=design.name,
            mark=mark,
        )
