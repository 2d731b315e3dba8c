"""AssetIssuer protocol - mints and sends one asset to a payer."""

from __future__ import annotations

from typing import Protocol

from paydrop.models.records import Design, IssueResult


class AssetIssuer(Protocol):
    """Builds, signs, and submits the issuance transaction."""

    async def issue(self, payer_address: str, design: Design) -> IssueResult:
        """Mint one unit of ``design`` and send it to ``payer_address``."""
        ...
