"""Server wallet and minting policy derived from the server mnemonic."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pycardano import (
    Address,
    HDWallet,
    Network,
    NativeScript,
    PaymentExtendedSigningKey,
    ScriptAll,
    ScriptHash,
    ScriptPubkey,
    StakeExtendedSigningKey,
    VerificationKeyHash,
)

from paydrop.errors import ConfigError
from paydrop.interfaces.credentials import CredentialDeriver
from paydrop.models.config import CardanoNetwork

log = logging.getLogger(__name__)

# CIP-1852 account 0, first external payment key and first stake key
PAYMENT_PATH = "m/1852'/1815'/0'/0/0"
STAKE_PATH = "m/1852'/1815'/0'/2/0"


@dataclass
class ServerWallet:
    """Keys, address and open sig-only minting policy of the drop server."""

    address: Address
    payment_signing_key: PaymentExtendedSigningKey
    policy: NativeScript
    policy_id: ScriptHash

    @property
    def address_str(self) -> str:
        return str(self.address)

    @property
    def policy_id_hex(self) -> str:
        return self.policy_id.payload.hex()


def build_policy(key_hash_hex: str) -> NativeScript:
    """Native script ``all [sig keyHash]``."""
    return ScriptAll([ScriptPubkey(VerificationKeyHash(bytes.fromhex(key_hash_hex)))])


def load_wallet(
    mnemonic: str,
    network: CardanoNetwork,
    credentials: CredentialDeriver,
) -> ServerWallet:
    """Derive the server wallet. Raises ConfigError on any failure."""
    try:
        root = HDWallet.from_mnemonic(mnemonic)
        payment_skey = PaymentExtendedSigningKey.from_hdwallet(root.derive_from_path(PAYMENT_PATH))
        stake_skey = StakeExtendedSigningKey.from_hdwallet(root.derive_from_path(STAKE_PATH))
    except Exception as exc:
        raise ConfigError(f"Could not derive server keys from mnemonic: {exc}") from exc

    address = Address(
        payment_part=payment_skey.to_verification_key().hash(),
        staking_part=stake_skey.to_verification_key().hash(),
        network=Network.MAINNET if network.is_mainnet else Network.TESTNET,
    )

    key_hash = credentials.spending_credential(str(address))
    policy = build_policy(key_hash)
    policy_id = policy.hash()

    log.info("Server address: %s", address)
    log.info("Policy ID: %s", policy_id.payload.hex())
    return ServerWallet(
        address=address,
        payment_signing_key=payment_skey,
        policy=policy,
        policy_id=policy_id,
    )
