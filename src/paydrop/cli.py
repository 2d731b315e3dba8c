"""CLI entry point for the paydrop daemon."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from paydrop.api.status import StatusQuery
from paydrop.config import load_config
from paydrop.daemon import run_daemon
from paydrop.errors import ConfigError
from paydrop.models.records import MarkOutcome
from paydrop.storage.sqlite import SQLiteStateStore

LOVELACE_PER_ADA = 1_000_000


def _ada(lovelace: int) -> str:
    return f"{lovelace / LOVELACE_PER_ADA:.6f} ADA"


def _load(ctx: click.Context):
    try:
        return load_config(ctx.obj["config_path"])
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """paydrop - pay once, receive one NFT per stake key."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Daemon ─────────────────────────────────────────────


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the deposit watcher and status API."""
    cfg = _load(ctx)
    if not ctx.obj["verbose"]:
        logging.getLogger().setLevel(cfg.log_level.upper())
    click.echo(f"Starting paydrop daemon ({cfg.network.value}, price {_ada(cfg.price_lovelace)})")
    try:
        asyncio.run(run_daemon(cfg))
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show daemon configuration."""
    cfg = _load(ctx)
    click.echo(f"Network:       {cfg.network.value}")
    click.echo(f"Blockfrost:    {cfg.resolved_blockfrost_url()}")
    click.echo(f"Project ID:    {'***configured***' if cfg.blockfrost_project_id else '(not set)'}")
    click.echo(f"Mnemonic:      {'***configured***' if cfg.server_mnemonic else '(not set)'}")
    click.echo(f"Price:         {cfg.price_lovelace} lovelace ({_ada(cfg.price_lovelace)})")
    click.echo(f"Min ADA:       {cfg.min_ada_lovelace} lovelace")
    click.echo(f"Poll interval: {cfg.poll_interval}s")
    click.echo(f"Designs:       {cfg.designs_path}")
    click.echo(f"DB path:       {cfg.db_path}")
    click.echo(f"HTTP:          {cfg.http.host}:{cfg.http.port}")


# ── Entitlements ───────────────────────────────────────


@cli.command()
@click.argument("identity")
@click.pass_context
def lookup(ctx: click.Context, identity: str) -> None:
    """Show the entitlement status of a stake credential hash."""
    cfg = _load(ctx)

    async def _lookup():
        store = SQLiteStateStore(cfg.db_path)
        await store.initialize()
        try:
            result = await StatusQuery(store).lookup(identity)
            click.echo(json.dumps(result.to_dict()))
        finally:
            await store.close()

    asyncio.run(_lookup())


@cli.command()
@click.pass_context
def pending(ctx: click.Context) -> None:
    """List claimed entitlements whose issuance has not been recorded."""
    cfg = _load(ctx)

    async def _pending():
        store = SQLiteStateStore(cfg.db_path)
        await store.initialize()
        try:
            records = await store.get_pending_entitlements()
            if not records:
                click.echo("No pending entitlements.")
                return
            for r in records:
                click.echo(f"  stake={r.identity} paid_tx={r.paid_tx} "
                           f"payer={r.payer_address[:24]}... since={r.created_at}")
        finally:
            await store.close()

    asyncio.run(_pending())


@cli.command()
@click.argument("identity")
@click.argument("tx_hash")
@click.argument("asset_name")
@click.pass_context
def resolve(ctx: click.Context, identity: str, tx_hash: str, asset_name: str) -> None:
    """Record an issuance found by an out-of-band audit.

    Safe to repeat: the same TX_HASH twice is a no-op, and an entitlement
    that already carries a different issuance is left untouched.
    """
    cfg = _load(ctx)

    async def _resolve() -> MarkOutcome:
        store = SQLiteStateStore(cfg.db_path)
        await store.initialize()
        try:
            outcome = await store.mark_fulfilled(identity, tx_hash, asset_name)
            if outcome is MarkOutcome.MARKED:
                await store.log_activity(
                    "operator_resolved",
                    f"Operator recorded issuance of {asset_name}",
                    identity=identity,
                    tx_hash=tx_hash,
                )
            return outcome
        finally:
            await store.close()

    outcome = asyncio.run(_resolve())
    click.echo(f"Result: {outcome.value}")
    if outcome in (MarkOutcome.CONFLICT, MarkOutcome.NOT_CLAIMED):
        sys.exit(1)


@cli.command()
@click.option("-n", "--limit", type=int, default=20, help="Number of entries to show")
@click.pass_context
def activity(ctx: click.Context, limit: int) -> None:
    """Show recent activity."""
    cfg = _load(ctx)

    async def _activity():
        store = SQLiteStateStore(cfg.db_path)
        await store.initialize()
        try:
            entries = await store.get_recent_activity(limit)
            if not entries:
                click.echo("No activity recorded.")
                return
            for a in entries:
                click.echo(f"  {a.created_at} [{a.event_type}] {a.message}"
                           + (f" tx={a.tx_hash}" if a.tx_hash else ""))
        finally:
            await store.close()

    asyncio.run(_activity())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
