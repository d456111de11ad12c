"""Human-readable Factom addresses (base58check).

An address string is the base58check encoding of ``prefix(2) || payload(32)``;
the checksum is the first four bytes of ``sha256d(prefix || payload)``.

  FA  factoid public address, payload = RCD hash
  EC  entry credit public address, payload = ed25519 public key
  Es  entry credit private address, payload = ed25519 seed
"""

import base58
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

from pegnet_api.exceptions import InvalidAddressError

FA_PREFIX = bytes([0x5F, 0xB1])
EC_PREFIX = bytes([0x59, 0x2A])
ES_PREFIX = bytes([0x5D, 0xF6])

ADDRESS_LENGTH = 52  # characters
_DECODED_LENGTH = 2 + 32


def encode_address(prefix: bytes, payload: bytes) -> str:
    return base58.b58encode_check(prefix + payload).decode("ascii")


def decode_address(address: str, prefix: bytes) -> bytes:
    """Decode ``address`` and return its 32-byte payload.

    Raises:
        InvalidAddressError: On wrong length, prefix, characters or checksum.
    """
    if len(address) != ADDRESS_LENGTH:
        raise InvalidAddressError(f"invalid length: {len(address)}")
    try:
        raw = base58.b58decode_check(address)
    except ValueError as e:
        raise InvalidAddressError(f"invalid base58check encoding: {e}") from e
    if len(raw) != _DECODED_LENGTH:
        raise InvalidAddressError("invalid length")
    if raw[:2] != prefix:
        raise InvalidAddressError("invalid prefix")
    return raw[2:]


def is_valid_fa_address(address: str) -> bool:
    try:
        decode_address(address, FA_PREFIX)
    except InvalidAddressError:
        return False
    return True


class EntryCreditKey:
    """An entry credit private address (Es...) and its signing key."""

    def __init__(self, es_address: str) -> None:
        seed = decode_address(es_address, ES_PREFIX)
        self._private_key = ed25519.Ed25519PrivateKey.from_private_bytes(seed)
        self._es_address = es_address

    @property
    def public_key(self) -> bytes:
        return self._private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @property
    def ec_address(self) -> str:
        """The public EC... address whose balance funds entries."""
        return encode_address(EC_PREFIX, self.public_key)

    def sign(self, message: bytes) -> bytes:
        return self._private_key.sign(message)

    def __repr__(self) -> str:
        return f"EntryCreditKey({self.ec_address})"
