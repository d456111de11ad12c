"""Tests for entry marshalling, hashing, costing and commit messages.

Verifies:
- Binary layout and round trip through unmarshal_binary
- Entry hash is sha256(sha512(data) || data)
- Cost is 1 EC per started KiB of payload, minimum 1, max 10 KiB
- Commit message layout, signature and txid
"""

import hashlib

import pytest
from cryptography.hazmat.primitives.asymmetric import ed25519

from pegnet_api.exceptions import EntryError
from pegnet_api.factom.addresses import ES_PREFIX, EntryCreditKey, encode_address
from pegnet_api.factom.entry import ENTRY_HEADER_SIZE, Entry, build_commit

CHAIN = bytes.fromhex("cffce0f409ebba4ed236d49d89c70e4bd1f1367d86402a3363366683265a242d")


def _entry(content_size: int = 10, ext_ids: list[bytes] | None = None) -> Entry:
    return Entry(ext_ids=ext_ids or [], content=b"x" * content_size, chain_id=CHAIN)


class TestMarshal:
    def test_layout(self) -> None:
        entry = Entry(ext_ids=[b"ab", b"c"], content=b"hi", chain_id=CHAIN)
        data = entry.marshal_binary()
        assert data[0] == 0
        assert data[1:33] == CHAIN
        assert data[33:35] == (2 + 2 + 2 + 1).to_bytes(2, "big")
        assert data[35:] == b"\x00\x02ab\x00\x01chi"

    def test_unmarshal_round_trip(self) -> None:
        entry = Entry(ext_ids=[b"", b"tx"], content=b'{"version":1}', chain_id=CHAIN)
        assert Entry.unmarshal_binary(entry.marshal_binary()) == entry

    def test_missing_chain_id(self) -> None:
        with pytest.raises(EntryError, match="chain id"):
            Entry(content=b"x").marshal_binary()

    def test_truncated_data(self) -> None:
        with pytest.raises(EntryError, match="insufficient length"):
            Entry.unmarshal_binary(b"\x00" * 10)

    def test_bad_version(self) -> None:
        data = bytearray(_entry().marshal_binary())
        data[0] = 1
        with pytest.raises(EntryError, match="version"):
            Entry.unmarshal_binary(bytes(data))

    def test_ext_ids_size_past_end(self) -> None:
        data = b"\x00" + CHAIN + b"\x00\x10" + b"\x00\x01"
        with pytest.raises(EntryError):
            Entry.unmarshal_binary(data)


def test_hash_definition() -> None:
    entry = _entry()
    data = entry.marshal_binary()
    expected = hashlib.sha256(hashlib.sha512(data).digest() + data).digest()
    assert entry.compute_hash() == expected


def test_hash_depends_on_chain() -> None:
    a = _entry()
    b = Entry(ext_ids=[], content=a.content, chain_id=bytes(32))
    assert a.compute_hash() != b.compute_hash()


class TestCost:
    def test_empty_entry_costs_one(self) -> None:
        assert _entry(0).cost() == 1

    def test_exactly_one_kib(self) -> None:
        assert _entry(1024).cost() == 1

    def test_one_byte_over_a_kib(self) -> None:
        assert _entry(1025).cost() == 2

    def test_ext_ids_count_toward_size(self) -> None:
        # 1020 content + (2 + 10) ext id bytes = 1032 payload bytes
        assert _entry(1020, [b"0123456789"]).cost() == 2

    def test_maximum_size(self) -> None:
        assert _entry(10240).cost() == 10

    def test_too_large(self) -> None:
        with pytest.raises(EntryError, match="exceeds"):
            _entry(10241).cost()


def test_build_commit() -> None:
    seed = bytes(range(32))
    key = EntryCreditKey(encode_address(ES_PREFIX, seed))
    entry = _entry(2000)

    commit = build_commit(entry, key, timestamp_ms=1_600_000_000_000)

    signed = commit.message[:40]
    assert len(commit.message) == 40 + 32 + 64
    assert signed[0] == 0
    assert int.from_bytes(signed[1:7], "big") == 1_600_000_000_000
    assert signed[7:39] == entry.compute_hash()
    assert signed[39] == 2
    assert commit.message[40:72] == key.public_key
    ed25519.Ed25519PrivateKey.from_private_bytes(seed).public_key().verify(
        commit.message[72:], signed
    )
    assert commit.txid == hashlib.sha256(signed).digest()


def test_to_dict_is_hex() -> None:
    entry = Entry(ext_ids=[b"\x01"], content=b"\xff", chain_id=CHAIN)
    assert entry.to_dict() == {
        "entryhash": entry.compute_hash().hex(),
        "chainid": CHAIN.hex(),
        "extids": ["01"],
        "content": "ff",
    }


def test_header_size_constant() -> None:
    assert len(_entry(0).marshal_binary()) == ENTRY_HEADER_SIZE
