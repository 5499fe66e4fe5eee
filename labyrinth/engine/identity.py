"""
labyrinth.engine.identity — Signer Tokens & Wallet Addresses
=============================================================

The transport hands every operation a :class:`Signer`.  A signer token is
either an opaque identifier or a 20-byte address; only the address form
can be auto-bound to a wallet on first submission.

Wallets are carried as lowercase ``0x``-prefixed hex strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from labyrinth.constants import DEFAULT_USERNAME_PREFIX, WALLET_BYTES
from labyrinth.errors import InvalidInput

__all__ = ["Signer", "default_username", "is_wallet", "normalize_wallet"]

_HEX_RE = re.compile(rf"^(?:0x)?([0-9a-fA-F]{{{WALLET_BYTES * 2}}})$")


def normalize_wallet(value: str | bytes) -> str:
    """Return the canonical ``0x…`` form of a 20-byte wallet address.

    Raises :class:`~labyrinth.errors.InvalidInput` for anything else.
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != WALLET_BYTES:
            raise InvalidInput("wallet", f"expected {WALLET_BYTES} bytes, got {len(value)}")
        return "0x" + bytes(value).hex()
    match = _HEX_RE.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise InvalidInput("wallet", f"not a {WALLET_BYTES}-byte hex address: {value!r}")
    return "0x" + match.group(1).lower()


def is_wallet(value: str | bytes) -> bool:
    try:
        normalize_wallet(value)
    except InvalidInput:
        return False
    return True


def default_username(wallet: str) -> str:
    """``Player_<first 4 bytes hex>`` for auto-registered wallets."""
    return f"{DEFAULT_USERNAME_PREFIX}{normalize_wallet(wallet)[2:10]}"


@dataclass(frozen=True, slots=True)
class Signer:
    """Authenticated caller token supplied by the transport."""

    token: str

    @property
    def address(self) -> str | None:
        """The wallet this token *is*, when it has the 20-byte address form."""
        try:
            return normalize_wallet(self.token)
        except InvalidInput:
            return None
