"""Cardano asset issuer - mints one NFT and sends it to the payer."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from pycardano import (
    Address,
    AlonzoMetadata,
    Asset,
    AssetName,
    AuxiliaryData,
    ChainContext,
    Metadata,
    MultiAsset,
    TransactionBuilder,
    TransactionOutput,
    Value,
)
from pycardano.exception import (
    InsufficientUTxOBalanceException,
    TransactionFailedException,
    UTxOSelectionException,
)

from paydrop.cardano.wallet import ServerWallet
from paydrop.models.records import Design, IssueResult

log = logging.getLogger(__name__)

CIP25_LABEL = 721
METADATA_STR_MAX = 64  # bytes per metadata string


def _metadata_str(value: str) -> str | list[str]:
    """Split strings over the 64-byte metadata limit into a list (CIP-25)."""
    raw = value.encode("utf-8")
    if len(raw) <= METADATA_STR_MAX:
        return value
    chunks = []
    while raw:
        cut = METADATA_STR_MAX
        # Do not split inside a multi-byte character
        while cut < len(raw) and (raw[cut] & 0xC0) == 0x80:
            cut -= 1
        chunks.append(raw[:cut].decode("utf-8"))
        raw = raw[cut:]
    return chunks


def build_cip25_metadata(policy_id_hex: str, design: Design, description: str) -> dict[str, Any]:
    """CIP-25 v2 metadata for a single asset."""
    src = f"ipfs://{design.cid}"
    return {
        policy_id_hex: {
            design.name: {
                "name": _metadata_str(design.name.replace("_", " ")),
                "image": _metadata_str(src),
                "mediaType": design.media_type,
                "files": [{"src": _metadata_str(src), "mediaType": design.media_type}],
                "description": _metadata_str(description),
            }
        },
        "version": "2.0",
    }


def _classify_error(exc: Exception) -> str:
    if isinstance(exc, (InsufficientUTxOBalanceException, UTxOSelectionException)):
        return "insufficient_funds"
    if isinstance(exc, TransactionFailedException):
        return "submit_failed"
    return "unknown"


class CardanoAssetIssuer:
    """Implements the AssetIssuer protocol on top of pycardano.

    Transaction building, coin selection, signing and submission are all
    pycardano's; this class only assembles the mint. Blocking chain
    context calls run in a worker thread.
    """

    def __init__(
        self,
        context: ChainContext,
        wallet: ServerWallet,
        min_ada_lovelace: int = 1_500_000,
        description: str = "One of five designs.",
    ) -> None:
        self._context = context
        self._wallet = wallet
        self._min_ada = min_ada_lovelace
        self._description = description

    def _multi_asset(self, design: Design) -> MultiAsset:
        return MultiAsset({
            self._wallet.policy_id: Asset({AssetName(design.name.encode("utf-8")): 1}),
        })

    def _build_and_submit(self, payer_address: str, design: Design) -> str:
        metadata = build_cip25_metadata(self._wallet.policy_id_hex, design, self._description)

        builder = TransactionBuilder(self._context)
        builder.add_input_address(self._wallet.address)
        builder.mint = self._multi_asset(design)
        builder.native_scripts = [self._wallet.policy]
        builder.auxiliary_data = AuxiliaryData(
            AlonzoMetadata(metadata=Metadata({CIP25_LABEL: metadata}))
        )
        builder.add_output(
            TransactionOutput(
                Address.from_primitive(payer_address),
                Value(self._min_ada, self._multi_asset(design)),
            )
        )

        signed = builder.build_and_sign(
            [self._wallet.payment_signing_key],
            change_address=self._wallet.address,
        )
        self._context.submit_tx(signed)
        return str(signed.id)

    async def issue(self, payer_address: str, design: Design) -> IssueResult:
        log.info("Submitting mint of %s to %s", design.name, payer_address[:24])
        try:
            tx_hash = await asyncio.to_thread(self._build_and_submit, payer_address, design)
        except Exception as exc:
            error_type = _classify_error(exc)
            log.error("Mint of %s to %s failed: %s (%s)", design.name, payer_address[:24], error_type, exc)
            return IssueResult(
                success=False,
                payer_address=payer_address,
                asset_name=design.name,
                error=f"{error_type}:{exc}",
            )

        log.info("Mint submitted for %s (tx=%s)", design.name, tx_hash)
        return IssueResult(
            success=True,
            payer_address=payer_address,
            asset_name=design.name,
            tx_hash=tx_hash,
        )
