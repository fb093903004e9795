"""
Public key identifier decoding.

Viewers look up archives by their NIP-19 ``npub`` identifier. The archive is
keyed by the raw hex public key, so every request first decodes the bech32
string into 64 lowercase hex characters.

Invariants:
    - Decoding is all or nothing: a hex key or InvalidIdentifierError
    - Only the ``npub`` human-readable part is accepted
    - The decoded payload is exactly 32 bytes
"""

from __future__ import annotations

from bech32 import bech32_decode, convertbits

from .errors import InvalidIdentifierError

NPUB_HRP = "npub"
NPUB_PREFIX = NPUB_HRP + "1"
PUBKEY_LENGTH = 32


def npub_to_hex(npub: str) -> str:
    """Convert an npub identifier to a hex public key.

    Args:
        npub: bech32 encoded public key, e.g. ``npub1...``

    Returns:
        64 character lowercase hex public key

    Raises:
        InvalidIdentifierError: If the identifier is not a valid npub
    """
    value = (npub or "").strip()

    if not value.startswith(NPUB_PREFIX):
        raise InvalidIdentifierError(
            f"invalid npub format: does not start with {NPUB_PREFIX}", identifier=value
        )

    hrp, data = bech32_decode(value)
    if hrp is None or data is None:
        raise InvalidIdentifierError("invalid npub: bad bech32 encoding", identifier=value)

    if hrp != NPUB_HRP:
        raise InvalidIdentifierError(f"not an npub: prefix is {hrp}", identifier=value)

    decoded = convertbits(data, 5, 8, False)
    if decoded is None or len(decoded) != PUBKEY_LENGTH:
        raise InvalidIdentifierError(
            "decoded npub value is not a 32 byte public key", identifier=value
        )

    return bytes(decoded).hex()
