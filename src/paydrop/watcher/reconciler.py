"""Reconciler - one pass of the deposit watching state machine."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Iterable

from paydrop.errors import LedgerIndexError, ResolutionError
from paydrop.interfaces.ledger import LedgerIndex
from paydrop.interfaces.store import StateStore
from paydrop.models.deposits import Deposit
from paydrop.models.records import ClaimOutcome, EntitlementRecord, ScanReport
from paydrop.policy.classifier import DepositClassifier
from paydrop.watcher.fulfillment import FulfillmentInvoker
from paydrop.watcher.resolver import PayerResolver

log = logging.getLogger(__name__)


class Reconciler:
    """Walks a page of deposits and fulfills each new entitled payer once.

    Holds no state between passes. Whether a deposit is new and whether
    an identity is entitled are both answered by the store, so overlapping
    or concurrent passes cannot double-issue.
    """

    def __init__(
        self,
        store: StateStore,
        ledger: LedgerIndex,
        classifier: DepositClassifier,
        resolver: PayerResolver,
        invoker: FulfillmentInvoker,
        watch_address: str,
        page_size: int = 100,
    ) -> None:
        self._store = store
        self._ledger = ledger
        self._classifier = classifier
        self._resolver = resolver
        self._invoker = invoker
        self._watch_address = watch_address
        self._page_size = page_size

    async def reconcile_once(self) -> ScanReport:
        """Fetch the newest page at the watched address and process it."""
        try:
            deposits = await self._ledger.list_recent_deposits(
                self._watch_address, self._page_size,
            )
        except LedgerIndexError as exc:
            log.error("scan error: %s", exc)
            await self._store.log_activity("scan_failed", f"Scan failed: {exc}")
            raise
        return await self.process_batch(deposits)

    async def process_batch(self, deposits: Iterable[Deposit]) -> ScanReport:
        """Run the state machine over ``deposits`` in the given order."""
        started = datetime.now(timezone.utc).isoformat()
        start_time = time.monotonic()
        report = ScanReport(started_at=started)

        for deposit in deposits:
            report.total += 1
            try:
                outcome = await self._process_deposit(deposit)
            except Exception as exc:
                # Left unseen; the next scan picks it up again.
                log.error("Error processing deposit %s: %s", deposit.deposit_id, exc, exc_info=True)
                outcome = "errors"
            setattr(report, outcome, getattr(report, outcome) + 1)

        report.duration_ms = int((time.monotonic() - start_time) * 1000)
        report.completed_at = datetime.now(timezone.utc).isoformat()

        if report.total - report.skipped_seen > 0:
            log.info(
                "Scan complete: %d deposits, %d new, %d fulfilled, %d failed, %d deferred in %dms",
                report.total, report.total - report.skipped_seen, report.fulfilled,
                report.fulfillment_failed, report.deferred, report.duration_ms,
            )
        return report

    async def _process_deposit(self, deposit: Deposit) -> str:
        """Handle one deposit. Returns the ScanReport counter to bump."""
        deposit_id = deposit.deposit_id

        # 1. Already examined
        if await self._store.is_seen(deposit_id):
            return "skipped_seen"

        # 2. Shape check
        verdict = self._classifier.evaluate(deposit)
        if not verdict.qualifies:
            log.debug("Deposit %s rejected: %s", deposit_id, verdict.reason)
            await self._store.log_activity(
                "deposit_rejected",
                f"Deposit {deposit_id} rejected: {verdict.reason}",
                tx_hash=deposit.tx_hash,
            )
            await self._store.mark_seen(deposit_id)
            return "rejected"

        # 3. Resolve the payer
        try:
            payer = await self._resolver.resolve(deposit.tx_hash)
        except ResolutionError as exc:
            log.warning("Payer of %s not resolved yet, will retry: %s", deposit_id, exc)
            return "deferred"

        if payer.address is None or payer.identity is None:
            await self._store.log_activity(
                "payer_unresolved",
                "No stake credential on payer address" if payer.address else "No payer address",
                tx_hash=deposit.tx_hash,
                amount=self._classifier.price,
            )
            await self._store.mark_seen(deposit_id)
            return "no_identity"

        # 4. Claim the identity
        outcome = await self._store.claim(payer.identity, payer.address, deposit.tx_hash)
        if outcome is ClaimOutcome.ALREADY_CLAIMED:
            log.info("Stake already entitled; ignoring payment %s from %s", deposit.tx_hash, payer.identity)
            await self._store.log_activity(
                "duplicate_payment",
                "Payment from an already entitled stake",
                identity=payer.identity,
                tx_hash=deposit.tx_hash,
                amount=self._classifier.price,
            )
            await self._store.mark_seen(deposit_id)
            return "duplicate"

        # The claim is committed. From here on nothing but the issuer may
        # keep this deposit from being fulfilled.
        try:
            await self._store.log_activity(
                "entitlement_claimed",
                f"Claimed entitlement for payment {deposit_id}",
                identity=payer.identity,
                tx_hash=deposit.tx_hash,
                amount=self._classifier.price,
            )
        except Exception as exc:
            log.warning("Could not record claim of %s in activity log: %s", payer.identity, exc)

        # 5. Fulfill. The deposit is accounted for either way; a stuck
        # pending entitlement is retried by an operator, not by rescanning.
        record = EntitlementRecord(
            identity=payer.identity,
            payer_address=payer.address,
            paid_tx=deposit.tx_hash,
        )
        try:
            result = await self._invoker.fulfill(record)
        finally:
            await self._store.mark_seen(deposit_id)

        if result.success:
            log.info("Processed payment %s -> %s", deposit.tx_hash, result.tx_hash)
            return "fulfilled"
        return "fulfillment_failed"
