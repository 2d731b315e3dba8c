"""Configuration models for the daemon."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

BLOCKFROST_URLS = {
    "mainnet": "https://cardano-mainnet.blockfrost.io/api/v0",
    "preprod": "https://cardano-preprod.blockfrost.io/api/v0",
    "preview": "https://cardano-preview.blockfrost.io/api/v0",
}

# Blockfrost rejects larger `count` values on paginated endpoints
BLOCKFROST_MAX_PAGE = 100


class CardanoNetwork(str, Enum):
    """Cardano network the drop runs against."""

    MAINNET = "mainnet"
    PREPROD = "preprod"
    PREVIEW = "preview"

    @property
    def is_mainnet(self) -> bool:
        return self is CardanoNetwork.MAINNET


@dataclass
class HttpConfig:
    """Status API / static file server."""

    host: str = "0.0.0.0"
    port: int = 3003
    static_dir: str = "public"


@dataclass
class DropConfig:
    """Complete daemon configuration."""

    # Daemon
    poll_interval: float = 6.0  # seconds
    error_backoff: float = 30.0  # seconds
    page_size: int = 100  # UTxOs fetched per scan, newest first
    log_level: str = "info"

    # Cardano
    network: CardanoNetwork = CardanoNetwork.MAINNET
    blockfrost_project_id: str = ""  # loaded from env var PAYDROP_BLOCKFROST_KEY
    blockfrost_url: str = ""  # derived from network when empty
    server_mnemonic: str = ""  # loaded from env var PAYDROP_MNEMONIC

    # Drop
    price_lovelace: int = 15_000_000  # 15 ADA
    min_ada_lovelace: int = 1_500_000  # carried alongside the minted asset
    designs_path: str = "designs.json"
    description: str = "One of five designs."

    # Storage
    db_path: str = "~/.paydrop/state.db"

    # HTTP
    http: HttpConfig = field(default_factory=HttpConfig)

    def resolved_blockfrost_url(self) -> str:
        return self.blockfrost_url or BLOCKFROST_URLS[self.network.value]
