"""Main daemon - wires the scan loop and HTTP server to a context."""

from __future__ import annotations

import asyncio
import logging
import random
import signal

from paydrop.api.server import HttpServer, create_app
from paydrop.api.status import StatusQuery
from paydrop.context import DropContext, open_context
from paydrop.models.config import DropConfig
from paydrop.models.records import ScanReport
from paydrop.policy.classifier import DepositClassifier
from paydrop.watcher.fulfillment import FulfillmentInvoker
from paydrop.watcher.reconciler import Reconciler
from paydrop.watcher.resolver import PayerResolver
from paydrop.watcher.scheduler import PeriodicTask

log = logging.getLogger(__name__)


def build_reconciler(ctx: DropContext, rng: random.Random | None = None) -> Reconciler:
    """Assemble the deposit state machine from the context's collaborators."""
    cfg = ctx.config
    return Reconciler(
        store=ctx.store,
        ledger=ctx.ledger,
        classifier=DepositClassifier(cfg.price_lovelace),
        resolver=PayerResolver(ctx.ledger, ctx.credentials),
        invoker=FulfillmentInvoker(ctx.store, ctx.issuer, ctx.catalog, rng=rng),
        watch_address=ctx.watch_address,
        page_size=cfg.page_size,
    )


class DropDaemon:
    """Pay-then-airdrop daemon.

    Runs the reconciler on a fixed interval and serves the status API.
    """

    def __init__(self, ctx: DropContext, serve_http: bool = True) -> None:
        self._ctx = ctx
        self._stopped = asyncio.Event()
        self.reconciler = build_reconciler(ctx)
        self.status = StatusQuery(ctx.store)
        self.scanner = PeriodicTask(
            "deposit-scan",
            self._scan,
            interval=ctx.config.poll_interval,
            error_backoff=ctx.config.error_backoff,
        )
        self.http: HttpServer | None = None
        if serve_http:
            cfg = ctx.config
            app = create_app(
                self.status,
                network=cfg.network.value,
                price_lovelace=cfg.price_lovelace,
                mint_address=ctx.watch_address,
                policy_id=ctx.policy_id,
                static_dir=cfg.http.static_dir,
            )
            self.http = HttpServer(app, cfg.http.host, cfg.http.port)

    async def _scan(self) -> ScanReport:
        return await self.reconciler.reconcile_once()

    async def start(self) -> None:
        """Start serving and scanning; returns after stop()."""
        cfg = self._ctx.config
        log.info("Starting paydrop daemon")
        log.info("  Network: %s", cfg.network.value)
        log.info("  Address: %s", self._ctx.watch_address)
        log.info("  Policy: %s", self._ctx.policy_id)
        log.info("  Price: %d lovelace", cfg.price_lovelace)

        await self._ctx.store.log_activity("daemon_started", "Daemon started")
        if self.http:
            await self.http.start()
        await self.scanner.start()

        try:
            await self._stopped.wait()
        finally:
            await self.scanner.stop()
            if self.http:
                await self.http.stop()
            await self._ctx.store.log_activity("daemon_stopped", "Daemon stopped")
            await self._ctx.close()
            log.info("Daemon shut down cleanly")

    async def stop(self) -> None:
        """Signal the daemon to stop gracefully."""
        log.info("Stop requested")
        self._stopped.set()


async def run_daemon(cfg: DropConfig) -> None:
    """Entry point for running the daemon."""
    ctx = await open_context(cfg)
    daemon = DropDaemon(ctx)

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(daemon.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await daemon.start()
