"""Payer resolver: first input address to stake credential."""

from __future__ import annotations

import pytest

from paydrop.errors import ResolutionError
from paydrop.models.deposits import TxInput
from paydrop.watcher.resolver import PayerResolver
from tests.factories import ENTERPRISE_PAYER, PAYER_1, PAYER_2, STAKE_1, tx_hash_for


@pytest.fixture
def resolver(mock_ledger, mock_credentials):
    return PayerResolver(mock_ledger, mock_credentials)


async def test_first_input_is_the_payer(resolver, mock_ledger):
    tx = tx_hash_for("D1")
    mock_ledger.inputs[tx] = [TxInput(address=PAYER_1), TxInput(address=PAYER_2)]

    payer = await resolver.resolve(tx)

    assert payer.address == PAYER_1
    assert payer.identity == STAKE_1


async def test_no_inputs(resolver):
    payer = await resolver.resolve(tx_hash_for("unknown"))
    assert payer.address is None
    assert payer.identity is None


async def test_address_without_stake_part(resolver, mock_ledger):
    tx = tx_hash_for("D1")
    mock_ledger.inputs[tx] = [TxInput(address=ENTERPRISE_PAYER)]

    payer = await resolver.resolve(tx)

    assert payer.address == ENTERPRISE_PAYER
    assert payer.identity is None


async def test_lookup_failure_raises_resolution_error(resolver, mock_ledger):
    tx = tx_hash_for("D1")
    mock_ledger.inputs[tx] = [TxInput(address=PAYER_1)]
    mock_ledger.input_failures[tx] = 1

    with pytest.raises(ResolutionError):
        await resolver.resolve(tx)

    assert (await resolver.resolve(tx)).identity == STAKE_1
