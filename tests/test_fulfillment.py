"""Fulfillment invoker: design choice, issuance and the fulfillment mark."""

from __future__ import annotations

import random

import pytest

from paydrop.models.records import EntitlementRecord, MarkOutcome
from paydrop.watcher.fulfillment import FulfillmentInvoker
from tests.conftest import DESIGNS
from tests.factories import PAYER_1, STAKE_1, tx_hash_for
from tests.mocks import MockIssuer


async def _claimed(store) -> EntitlementRecord:
    await store.claim(STAKE_1, PAYER_1, tx_hash_for("D1"))
    return await store.get_entitlement(STAKE_1)


def test_empty_catalog_rejected(store, mock_issuer):
    with pytest.raises(ValueError):
        FulfillmentInvoker(store, mock_issuer, [])


def test_pick_design_draws_from_catalog(store, mock_issuer):
    invoker = FulfillmentInvoker(store, mock_issuer, DESIGNS, rng=random.Random(1))
    picks = {invoker.pick_design().name for _ in range(50)}
    assert picks <= {d.name for d in DESIGNS}
    # Independent draws; over 50 picks every design shows up
    assert picks == {d.name for d in DESIGNS}


async def test_fulfill_marks_entitlement(store, invoker, mock_issuer):
    record = await _claimed(store)

    result = await invoker.fulfill(record)

    assert result.success
    assert result.mark is MarkOutcome.MARKED
    assert result.tx_hash == "mint_tx_1"
    stored = await store.get_entitlement(STAKE_1)
    assert stored.fulfillment_tx == "mint_tx_1"
    assert stored.asset_name == result.asset_name
    assert mock_issuer.issue_calls[0][0] == PAYER_1


async def test_fulfill_skips_already_fulfilled(store, invoker, mock_issuer):
    await _claimed(store)
    await store.mark_fulfilled(STAKE_1, "mint_prev", "Design_Two")
    record = await store.get_entitlement(STAKE_1)

    result = await invoker.fulfill(record)

    assert result.success
    assert result.mark is MarkOutcome.ALREADY_MARKED
    assert result.tx_hash == "mint_prev"
    assert mock_issuer.issue_calls == []


async def test_issuer_failure_keeps_pending(store):
    issuer = MockIssuer(succeed=False, error="insufficient_funds:wallet empty")
    invoker = FulfillmentInvoker(store, issuer, DESIGNS)
    record = await _claimed(store)

    result = await invoker.fulfill(record)

    assert not result.success
    assert result.error == "insufficient_funds:wallet empty"
    assert not (await store.get_entitlement(STAKE_1)).fulfilled
    activity = await store.get_recent_activity(1)
    assert activity[0].event_type == "issuance_failed"
    assert activity[0].tx_hash == tx_hash_for("D1")


async def test_issuer_exception_becomes_failure(store):
    issuer = MockIssuer(raises=RuntimeError("node unreachable"))
    invoker = FulfillmentInvoker(store, issuer, DESIGNS)
    record = await _claimed(store)

    result = await invoker.fulfill(record)

    assert not result.success
    assert "node unreachable" in result.error
    assert not (await store.get_entitlement(STAKE_1)).fulfilled
