"""Shared fixtures for paydrop tests."""

from __future__ import annotations

import random

import pytest
from pytest_metadata.plugin import metadata_key

from paydrop.context import DropContext
from paydrop.models.config import CardanoNetwork, DropConfig, HttpConfig
from paydrop.models.records import Design
from paydrop.policy.classifier import DepositClassifier
from paydrop.storage.sqlite import SQLiteStateStore
from paydrop.watcher.fulfillment import FulfillmentInvoker
from paydrop.watcher.reconciler import Reconciler
from paydrop.watcher.resolver import PayerResolver

from tests.factories import (
    PAYER_1,
    PAYER_1_ALT,
    PAYER_2,
    PRICE,
    STAKE_1,
    STAKE_2,
)
from tests.mocks import MockCredentials, MockIssuer, MockLedger

WATCH_ADDRESS = "addr_test1_server_watch_address"
POLICY_ID = "cd" * 28

DESIGNS = [
    Design(name="Design_One", cid="QmDesignOne"),
    Design(name="Design_Two", cid="QmDesignTwo"),
    Design(name="Design_Three", cid="QmDesignThree", media_type="image/gif"),
]


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add drop parameters to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "Cardano (mocked)"
    meta["Price (lovelace)"] = str(PRICE)
    meta["Watch Address"] = WATCH_ADDRESS


def make_test_config(**overrides) -> DropConfig:
    """Build a DropConfig suitable for testing."""
    defaults = dict(
        poll_interval=0.01,
        error_backoff=0.01,
        page_size=100,
        network=CardanoNetwork.PREPROD,
        blockfrost_project_id="preprodTESTKEY",
        server_mnemonic="",
        price_lovelace=PRICE,
        db_path=":memory:",
        http=HttpConfig(host="127.0.0.1", port=0, static_dir=""),
    )
    defaults.update(overrides)
    return DropConfig(**defaults)


@pytest.fixture
def test_config():
    return make_test_config()


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteStateStore."""
    s = SQLiteStateStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def mock_ledger():
    return MockLedger()


@pytest.fixture
def mock_credentials():
    # PAYER_1 and PAYER_1_ALT share a stake key (same wallet, two addresses)
    return MockCredentials({
        PAYER_1: STAKE_1,
        PAYER_1_ALT: STAKE_1,
        PAYER_2: STAKE_2,
    })


@pytest.fixture
def mock_issuer():
    return MockIssuer(succeed=True)


@pytest.fixture
def invoker(store, mock_issuer):
    return FulfillmentInvoker(store, mock_issuer, DESIGNS, rng=random.Random(7))


@pytest.fixture
def reconciler(store, mock_ledger, mock_credentials, invoker):
    """Reconciler wired to mocked collaborators and a real store."""
    return Reconciler(
        store=store,
        ledger=mock_ledger,
        classifier=DepositClassifier(PRICE),
        resolver=PayerResolver(mock_ledger, mock_credentials),
        invoker=invoker,
        watch_address=WATCH_ADDRESS,
        page_size=100,
    )


@pytest.fixture
def drop_context(test_config, store, mock_ledger, mock_credentials, mock_issuer):
    """DropContext built from mocks, as the entry point would build it."""
    return DropContext(
        config=test_config,
        store=store,
        ledger=mock_ledger,
        credentials=mock_credentials,
        issuer=mock_issuer,
        catalog=DESIGNS,
        watch_address=WATCH_ADDRESS,
        policy_id=POLICY_ID,
    )
