"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from paydrop.errors import ConfigError
from paydrop.models.config import BLOCKFROST_MAX_PAGE, CardanoNetwork, DropConfig, HttpConfig


def _network(value: str) -> CardanoNetwork:
    try:
        return CardanoNetwork(value.strip().lower())
    except ValueError:
        raise ConfigError(f"Unknown network {value!r}") from None


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "PAYDROP_",
) -> DropConfig:
    """Load daemon configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (PAYDROP_BLOCKFROST_KEY, etc.)
        2. TOML config file
        3. Defaults from DropConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = DropConfig()

    # ── Daemon section ─────────────────────────────────────
    daemon = raw.get("daemon", {})
    if v := daemon.get("poll_interval"):
        cfg.poll_interval = float(v)
    if v := daemon.get("error_backoff"):
        cfg.error_backoff = float(v)
    if v := daemon.get("page_size"):
        cfg.page_size = int(v)
    if v := daemon.get("log_level"):
        cfg.log_level = str(v)

    # ── Cardano section ────────────────────────────────────
    cardano = raw.get("cardano", {})
    if v := cardano.get("network"):
        cfg.network = _network(str(v))
    if v := cardano.get("blockfrost_project_id"):
        cfg.blockfrost_project_id = str(v)
    if v := cardano.get("blockfrost_url"):
        cfg.blockfrost_url = str(v)
    if v := cardano.get("server_mnemonic"):
        cfg.server_mnemonic = str(v)

    # ── Drop section ───────────────────────────────────────
    drop = raw.get("drop", {})
    if v := drop.get("price_lovelace"):
        cfg.price_lovelace = int(v)
    if v := drop.get("min_ada_lovelace"):
        cfg.min_ada_lovelace = int(v)
    if v := drop.get("designs_path"):
        cfg.designs_path = str(v)
    if v := drop.get("description"):
        cfg.description = str(v)

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("db_path"):
        cfg.db_path = str(v)

    # ── HTTP section ───────────────────────────────────────
    http_raw = raw.get("http", {})
    cfg.http = HttpConfig(
        host=http_raw.get("host", "0.0.0.0"),
        port=int(http_raw.get("port", 3003)),
        static_dir=http_raw.get("static_dir", "public"),
    )

    # ── Environment variable overrides (highest priority) ──
    if key := os.environ.get(f"{env_prefix}BLOCKFROST_KEY"):
        cfg.blockfrost_project_id = key
    if mnemonic := os.environ.get(f"{env_prefix}MNEMONIC"):
        cfg.server_mnemonic = mnemonic
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = _network(net)
    if price := os.environ.get(f"{env_prefix}PRICE_LOVELACE"):
        cfg.price_lovelace = int(price)
    if interval := os.environ.get(f"{env_prefix}POLL_INTERVAL"):
        cfg.poll_interval = float(interval)
    if port := os.environ.get(f"{env_prefix}PORT"):
        cfg.http.port = int(port)
    if db_path := os.environ.get(f"{env_prefix}DB_PATH"):
        cfg.db_path = db_path

    if cfg.price_lovelace <= 0:
        raise ConfigError("price_lovelace must be positive")
    if not 0 < cfg.page_size <= BLOCKFROST_MAX_PAGE:
        raise ConfigError(f"page_size must be between 1 and {BLOCKFROST_MAX_PAGE}")

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg


def validate_secrets(cfg: DropConfig) -> None:
    """Startup check for the credentials the daemon cannot run without."""
    missing = []
    if not cfg.blockfrost_project_id:
        missing.append("blockfrost key (PAYDROP_BLOCKFROST_KEY)")
    if not cfg.server_mnemonic:
        missing.append("server mnemonic (PAYDROP_MNEMONIC)")
    if missing:
        raise ConfigError("Missing " + " and ".join(missing))
