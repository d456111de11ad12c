"""Factom entry construction, hashing, costing and commit messages.

Binary layout of an entry::

    version(1) | chain_id(32) | ext_ids_size(2) | [len(2) | ext_id]... | content

The first 35 bytes are the header and are not charged for.
"""

import hashlib
import struct
import time
from dataclasses import dataclass, field

from pegnet_api.exceptions import EntryError
from pegnet_api.factom.addresses import EntryCreditKey

ENTRY_HEADER_SIZE = 35
ENTRY_MAX_PAYLOAD = 10240
ENTRY_COST_UNIT = 1024  # bytes per entry credit


@dataclass
class Entry:
    """A Factom entry. ``chain_id`` is required before hashing or marshalling."""

    ext_ids: list[bytes] = field(default_factory=list)
    content: bytes = b""
    chain_id: bytes | None = None

    def marshal_binary(self) -> bytes:
        if self.chain_id is None or len(self.chain_id) != 32:
            raise EntryError("missing or invalid chain id")
        ext_ids_size = sum(2 + len(ext_id) for ext_id in self.ext_ids)
        if ext_ids_size > 0xFFFF:
            raise EntryError("ext ids too large")
        parts = [b"\x00", self.chain_id, struct.pack(">H", ext_ids_size)]
        for ext_id in self.ext_ids:
            parts.append(struct.pack(">H", len(ext_id)))
            parts.append(ext_id)
        parts.append(self.content)
        return b"".join(parts)

    @classmethod
    def unmarshal_binary(cls, data: bytes) -> "Entry":
        """Decode a marshalled entry.

        Raises:
            EntryError: If the data is truncated or the version is unknown.
        """
        if len(data) < ENTRY_HEADER_SIZE:
            raise EntryError("insufficient length")
        if data[0] != 0:
            raise EntryError(f"invalid version byte: {data[0]}")
        chain_id = data[1:33]
        (ext_ids_size,) = struct.unpack(">H", data[33:35])
        end = ENTRY_HEADER_SIZE + ext_ids_size
        if end > len(data):
            raise EntryError("invalid ext ids size")

        ext_ids: list[bytes] = []
        pos = ENTRY_HEADER_SIZE
        while pos < end:
            if pos + 2 > end:
                raise EntryError("truncated ext id length")
            (size,) = struct.unpack(">H", data[pos : pos + 2])
            pos += 2
            if pos + size > end:
                raise EntryError("ext id exceeds ext ids size")
            ext_ids.append(data[pos : pos + size])
            pos += size

        return cls(ext_ids=ext_ids, content=data[end:], chain_id=chain_id)

    def compute_hash(self) -> bytes:
        """Entry hash: sha256(sha512(data) || data)."""
        data = self.marshal_binary()
        return hashlib.sha256(hashlib.sha512(data).digest() + data).digest()

    def cost(self) -> int:
        """Entry credits needed to commit this entry to an existing chain.

        Raises:
            EntryError: If the payload exceeds the 10 KiB limit.
        """
        size = len(self.marshal_binary()) - ENTRY_HEADER_SIZE
        if size > ENTRY_MAX_PAYLOAD:
            raise EntryError(f"entry payload of {size} bytes exceeds {ENTRY_MAX_PAYLOAD}")
        cost = -(-size // ENTRY_COST_UNIT)
        return max(cost, 1)

    def to_dict(self) -> dict:
        """Raw entry JSON representation (hex-encoded fields)."""
        return {
            "entryhash": self.compute_hash().hex(),
            "chainid": self.chain_id.hex() if self.chain_id else None,
            "extids": [ext_id.hex() for ext_id in self.ext_ids],
            "content": self.content.hex(),
        }


@dataclass
class EntryCommit:
    """A signed commit for an entry plus the transaction id it will produce."""

    message: bytes
    txid: bytes


def build_commit(entry: Entry, key: EntryCreditKey, timestamp_ms: int | None = None) -> EntryCommit:
    """Build the signed commit message paying for ``entry`` with ``key``.

    Layout: version(1) | ms_timestamp(6) | entry_hash(32) | cost(1) | pubkey(32) | sig(64).
    The signature and txid cover the first 40 bytes.
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    signed = (
        b"\x00"
        + timestamp_ms.to_bytes(6, "big")
        + entry.compute_hash()
        + bytes([entry.cost()])
    )
    message = signed + key.public_key + key.sign(signed)
    return EntryCommit(message=message, txid=hashlib.sha256(signed).digest())
