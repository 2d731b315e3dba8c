"""Address credential extraction using pycardano."""

from __future__ import annotations

import logging

from pycardano import Address, ScriptHash, VerificationKeyHash

from paydrop.errors import ConfigError

log = logging.getLogger(__name__)


def _parse(address: str) -> Address:
    return Address.from_primitive(address)


class PyCardanoCredentials:
    """Implements the CredentialDeriver protocol.

    Base addresses yield their stake key (or stake script) hash. Enterprise,
    pointer, Byron and unparseable addresses yield None.
    """

    def staking_credential(self, address: str) -> str | None:
        try:
            parsed = _parse(address)
        except Exception:
            log.debug("Could not parse address %s", address[:24])
            return None

        part = parsed.staking_part
        if isinstance(part, (VerificationKeyHash, ScriptHash)):
            return part.payload.hex()
        return None

    def spending_credential(self, address: str) -> str:
        try:
            parsed = _parse(address)
        except Exception as exc:
            raise ConfigError(f"Invalid server address {address!r}: {exc}") from exc

        part = parsed.payment_part
        if not isinstance(part, VerificationKeyHash):
            raise ConfigError("Failed to derive payment key hash")
        return part.payload.hex()
