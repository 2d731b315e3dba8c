"""Deposit classifier - decides whether a UTxO is an exact-price payment."""

from __future__ import annotations

import logging

from paydrop.models.deposits import LOVELACE, Deposit
from paydrop.models.records import ClassifyResult

log = logging.getLogger(__name__)


class DepositClassifier:
    """Evaluates deposits against the drop price.

    A deposit qualifies only if its value is a single lovelace entry equal
    to the price. No tolerance, no overpay, no tokens riding along.
    """

    def __init__(self, price_lovelace: int) -> None:
        self._price = price_lovelace

    @property
    def price(self) -> int:
        return self._price

    def evaluate(self, deposit: Deposit) -> ClassifyResult:
        """Pure check; no I/O."""
        deposit_id = deposit.deposit_id

        if not deposit.amount:
            return ClassifyResult(False, "empty_amount", deposit_id)

        if len(deposit.amount) > 1:
            return ClassifyResult(False, "foreign_assets", deposit_id)

        entry = deposit.amount[0]
        if entry.unit != LOVELACE:
            return ClassifyResult(False, "wrong_unit", deposit_id)

        if entry.quantity != self._price:
            return ClassifyResult(False, "wrong_amount", deposit_id)

        log.debug("Deposit %s qualifies (%d lovelace)", deposit_id, entry.quantity)
        return ClassifyResult(True, "accepted", deposit_id)
