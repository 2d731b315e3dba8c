"""Process-wide collaborators, built once by the entry point."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Sequence

from pycardano import BlockFrostChainContext

from paydrop.cardano.blockfrost import BlockfrostLedgerIndex
from paydrop.cardano.credentials import PyCardanoCredentials
from paydrop.cardano.issuer import CardanoAssetIssuer
from paydrop.cardano.wallet import load_wallet
from paydrop.catalog import load_designs
from paydrop.config import validate_secrets
from paydrop.errors import ConfigError
from paydrop.interfaces.credentials import CredentialDeriver
from paydrop.interfaces.issuer import AssetIssuer
from paydrop.interfaces.ledger import LedgerIndex
from paydrop.models.config import DropConfig
from paydrop.models.records import Design
from paydrop.storage.sqlite import SQLiteStateStore

log = logging.getLogger(__name__)


@dataclass
class DropContext:
    """Everything the reconciler and the status API need.

    Owned by the entry point; nothing in the package reaches for globals.
    """

    config: DropConfig
    store: SQLiteStateStore
    ledger: LedgerIndex
    credentials: CredentialDeriver
    issuer: AssetIssuer
    catalog: Sequence[Design]
    watch_address: str
    policy_id: str
    _closers: list = field(default_factory=list, repr=False)

    async def close(self) -> None:
        for closer in self._closers:
            try:
                await closer()
            except Exception as exc:
                log.warning("Error while closing context: %s", exc)
        await self.store.close()


def _chain_context_url(blockfrost_url: str) -> str:
    """pycardano's Blockfrost client appends the API version itself."""
    url = blockfrost_url.rstrip("/")
    return url[: -len("/v0")] if url.endswith("/v0") else url


async def open_context(cfg: DropConfig) -> DropContext:
    """Build and initialize every collaborator from ``cfg``.

    Raises ConfigError when the daemon cannot start.
    """
    validate_secrets(cfg)
    catalog = load_designs(cfg.designs_path)

    credentials = PyCardanoCredentials()
    wallet = load_wallet(cfg.server_mnemonic, cfg.network, credentials)

    blockfrost_url = cfg.resolved_blockfrost_url()
    try:
        chain = await asyncio.to_thread(
            BlockFrostChainContext,
            project_id=cfg.blockfrost_project_id,
            base_url=_chain_context_url(blockfrost_url),
        )
    except Exception as exc:
        raise ConfigError(f"Could not reach Blockfrost at {blockfrost_url}: {exc}") from exc

    ledger = BlockfrostLedgerIndex(blockfrost_url, cfg.blockfrost_project_id)
    issuer = CardanoAssetIssuer(chain, wallet, cfg.min_ada_lovelace, cfg.description)

    store = SQLiteStateStore(cfg.db_path)
    await store.initialize()

    return DropContext(
        config=cfg,
        store=store,
        ledger=ledger,
        credentials=credentials,
        issuer=issuer,
        catalog=catalog,
        watch_address=wallet.address_str,
        policy_id=wallet.policy_id_hex,
        _closers=[ledger.close],
    )
