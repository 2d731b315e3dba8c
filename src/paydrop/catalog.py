"""Design catalog loading: designs.json -> list[Design]."""

from __future__ import annotations

import json
from pathlib import Path

from paydrop.errors import ConfigError
from paydrop.models.records import Design

MAX_ASSET_NAME_BYTES = 32


def parse_designs(raw: object) -> list[Design]:
    """Validate a decoded designs.json document.

    Expected shape: [{"name": "...", "cid": "...", "mediaType": "image/png"}, ...]
    """
    if not isinstance(raw, list) or not raw:
        raise ConfigError("Design catalog must be a non-empty JSON list")

    designs: list[Design] = []
    names: set[str] = set()
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ConfigError(f"Design #{i} is not an object")
        name = entry.get("name")
        cid = entry.get("cid")
        if not name or not isinstance(name, str):
            raise ConfigError(f"Design #{i} has no name")
        if not cid or not isinstance(cid, str):
            raise ConfigError(f"Design {name!r} has no cid")
        if len(name.encode("utf-8")) > MAX_ASSET_NAME_BYTES:
            raise ConfigError(f"Design name {name!r} exceeds {MAX_ASSET_NAME_BYTES} bytes")
        if name in names:
            raise ConfigError(f"Duplicate design name {name!r}")
        names.add(name)
        designs.append(Design(
            name=name,
            cid=cid,
            media_type=entry.get("mediaType") or "image/png",
        ))
    return designs


def load_designs(path: str | Path) -> list[Design]:
    p = Path(path).expanduser()
    if not p.exists():
        raise ConfigError(f"Design catalog not found: {p}")
    try:
        with open(p) as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Design catalog {p} is not valid JSON: {exc}") from exc
    return parse_designs(raw)
