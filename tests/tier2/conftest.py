"""Tier 2 fixtures: real Blockfrost API on preprod."""

from __future__ import annotations

import os

import pytest

from paydrop.cardano.blockfrost import BlockfrostLedgerIndex
from paydrop.models.config import BLOCKFROST_URLS

PREPROD_URL = BLOCKFROST_URLS["preprod"]


@pytest.fixture(scope="session")
def blockfrost_key():
    """Preprod project id from the environment. Skip tier2 tests if absent."""
    key = os.environ.get("PAYDROP_BLOCKFROST_KEY", "")
    if not key.startswith("preprod"):
        pytest.skip("PAYDROP_BLOCKFROST_KEY with a preprod project id not set")
    return key


@pytest.fixture
async def live_index(blockfrost_key):
    index = BlockfrostLedgerIndex(PREPROD_URL, blockfrost_key)
    yield index
    await index.close()
