"""Daemon lifecycle: wiring, scan loop, graceful shutdown."""

from __future__ import annotations

import asyncio

from paydrop.context import DropContext
from paydrop.daemon import DropDaemon, build_reconciler
from paydrop.storage.sqlite import SQLiteStateStore
from tests.conftest import DESIGNS, POLICY_ID, WATCH_ADDRESS, make_test_config
from tests.factories import PAYER_1, STAKE_1, make_deposit
from tests.mocks import ThreadIssuer


async def test_build_reconciler_from_context(drop_context, mock_ledger, mock_issuer):
    mock_ledger.add_payment(make_deposit("D1"), PAYER_1)
    reconciler = build_reconciler(drop_context)

    report = await reconciler.reconcile_once()

    assert report.fulfilled == 1
    assert len(mock_issuer.issue_calls) == 1
    assert mock_ledger.list_calls == [(WATCH_ADDRESS, drop_context.config.page_size)]


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        assert asyncio.get_running_loop().time() < deadline, "condition not reached"
        await asyncio.sleep(0.01)


async def test_daemon_scans_then_stops_cleanly(tmp_path, mock_ledger, mock_credentials, mock_issuer):
    db_path = str(tmp_path / "state.db")
    store = SQLiteStateStore(db_path)
    await store.initialize()
    ctx = DropContext(
        config=make_test_config(db_path=db_path),
        store=store,
        ledger=mock_ledger,
        credentials=mock_credentials,
        issuer=mock_issuer,
        catalog=DESIGNS,
        watch_address=WATCH_ADDRESS,
        policy_id=POLICY_ID,
    )
    mock_ledger.add_payment(make_deposit("D1"), PAYER_1)

    daemon = DropDaemon(ctx, serve_http=False)
    task = asyncio.create_task(daemon.start())

    await _wait_for(lambda: mock_issuer.issue_calls)
    # Keep scanning a few more times; nothing new is issued
    await _wait_for(lambda: daemon.scanner.runs >= 3)
    await daemon.stop()
    await asyncio.wait_for(task, timeout=2)

    assert len(mock_issuer.issue_calls) == 1
    assert not daemon.scanner.running

    # Context was closed; reopen the database to inspect what was persisted
    reopened = SQLiteStateStore(db_path)
    await reopened.initialize()
    try:
        record = await reopened.get_entitlement(STAKE_1)
        assert record.fulfillment_tx == "mint_tx_1"
        events = [e.event_type for e in reversed(await reopened.get_recent_activity(50))]
        assert events[0] == "daemon_started"
        assert events[-1] == "daemon_stopped"
        assert "fulfillment_success" in events
    finally:
        await reopened.close()


async def test_stop_during_issuance_records_fulfillment(tmp_path, mock_ledger, mock_credentials):
    """A stop requested while a mint is being submitted waits for it to be recorded."""
    db_path = str(tmp_path / "state.db")
    store = SQLiteStateStore(db_path)
    await store.initialize()
    issuer = ThreadIssuer(delay=0.2)
    ctx = DropContext(
        config=make_test_config(db_path=db_path),
        store=store,
        ledger=mock_ledger,
        credentials=mock_credentials,
        issuer=issuer,
        catalog=DESIGNS,
        watch_address=WATCH_ADDRESS,
        policy_id=POLICY_ID,
    )
    d1 = make_deposit("D1")
    mock_ledger.add_payment(d1, PAYER_1)

    daemon = DropDaemon(ctx, serve_http=False)
    task = asyncio.create_task(daemon.start())

    await _wait_for(lambda: issuer.issue_calls)
    await daemon.stop()
    await asyncio.wait_for(task, timeout=2)

    assert issuer.submitted == [PAYER_1]

    reopened = SQLiteStateStore(db_path)
    await reopened.initialize()
    try:
        record = await reopened.get_entitlement(STAKE_1)
        assert record.fulfillment_tx == "onchain_tx"
        assert await reopened.is_seen(d1.deposit_id)
    finally:
        await reopened.close()


async def test_scan_failures_do_not_stop_daemon(drop_context, mock_ledger):
    mock_ledger.fail_listing = True
    daemon = DropDaemon(drop_context, serve_http=False)
    task = asyncio.create_task(daemon.start())

    await _wait_for(lambda: daemon.scanner.failures >= 2)
    await daemon.stop()
    await asyncio.wait_for(task, timeout=2)

    assert daemon.scanner.failures >= 2


async def test_daemon_serves_http(store, mock_ledger, mock_credentials, mock_issuer):
    ctx = DropContext(
        config=make_test_config(),
        store=store,
        ledger=mock_ledger,
        credentials=mock_credentials,
        issuer=mock_issuer,
        catalog=DESIGNS,
        watch_address=WATCH_ADDRESS,
        policy_id=POLICY_ID,
    )
    daemon = DropDaemon(ctx, serve_http=True)
    assert daemon.http is not None

    task = asyncio.create_task(daemon.start())
    await _wait_for(lambda: daemon.scanner.runs >= 1)
    await daemon.stop()
    await asyncio.wait_for(task, timeout=2)
