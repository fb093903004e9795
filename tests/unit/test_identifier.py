"""
Unit tests for npub identifier decoding.

Tests cover:
- Decoding known npub values
- Determinism
- Rejection of wrong prefixes, bad checksums and wrong lengths
"""

import pytest
from bech32 import bech32_encode, convertbits

from nostr_restore.errors import InvalidIdentifierError
from nostr_restore.identifier import npub_to_hex


def encode(hrp: str, payload: bytes) -> str:
    """Helper to bech32 encode raw bytes."""
    return bech32_encode(hrp, convertbits(payload, 8, 5))


class TestNpubToHex:
    """Tests for npub_to_hex."""

    def test_known_vector(self):
        """Decodes the NIP-19 example npub."""
        npub = "npub10elfcs4fr0l0r8af98jlmgdh9c8tcxjvz9qkw038js35mp4dma8qzvjptg"
        assert (
            npub_to_hex(npub)
            == "7e7e9c42a91bfef19fa929e5fda1b72e0ebc1a4c1141673e2794234d86addf4e"
        )

    def test_encoded_key_round_trip(self):
        """Hex of an encoded key is the original key."""
        key = bytes(range(32))
        assert npub_to_hex(encode("npub", key)) == key.hex()

    def test_deterministic(self):
        """Decoding the same identifier twice gives the same result."""
        npub = encode("npub", b"\xab" * 32)
        first = npub_to_hex(npub)
        assert npub_to_hex(npub) == first
        assert len(first) == 64
        assert first == first.lower()

    def test_strips_whitespace(self):
        """Surrounding whitespace from form input is ignored."""
        key = b"\x01" * 32
        assert npub_to_hex(f"  {encode('npub', key)}\n") == key.hex()

    @pytest.mark.parametrize(
        "value",
        ["", "nsec1qqqqqq", "note1qqqqqq", "hello", "3bf0c63fcb93463407af97a5e5ee64fa"],
    )
    def test_wrong_prefix(self, value):
        """Values not starting with npub1 are rejected."""
        with pytest.raises(InvalidIdentifierError):
            npub_to_hex(value)

    def test_bad_checksum(self):
        """Truncated or corrupted npub is rejected."""
        with pytest.raises(InvalidIdentifierError):
            npub_to_hex("npub1qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqq")

    def test_corrupted_character(self):
        """Changing one character breaks the checksum."""
        npub = encode("npub", b"\x02" * 32)
        last = "q" if npub[-1] != "q" else "p"
        with pytest.raises(InvalidIdentifierError):
            npub_to_hex(npub[:-1] + last)

    def test_wrong_length_payload(self):
        """A valid bech32 npub that is not 32 bytes is rejected."""
        with pytest.raises(InvalidIdentifierError):
            npub_to_hex(encode("npub", b"\x03" * 20))

    def test_error_carries_identifier(self):
        """Error records the offending identifier."""
        with pytest.raises(InvalidIdentifierError) as exc_info:
            npub_to_hex("npub1bogus")
        assert exc_info.value.identifier == "npub1bogus"
        assert exc_info.value.code == "INVALID_IDENTIFIER"
