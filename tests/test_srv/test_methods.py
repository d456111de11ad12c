"""Tests for ApiMethods lookup handlers.

Verifies:
- Store misses translate to address-not-found, not-found or transaction-not-found
- Transaction lookups combine the stored record with the on-chain entry
- Collaborator failures on entry fetch are opaque internal errors
"""

import json
from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from pegnet_api.config import AppSettings
from pegnet_api.exceptions import (
    AddressNotFoundError,
    FactomClientError,
    InternalError,
    NotFoundError,
    RecordNotFound,
    TransactionNotFoundError,
)
from pegnet_api.factom.entry import Entry
from pegnet_api.models import TransactionBatchRecord
from pegnet_api.srv.methods import ApiMethods
from pegnet_api.srv.params import (
    ParamsGetPegnetBalances,
    ParamsGetPegnetRates,
    ParamsGetTransaction,
    ParamsGetTransactionStatus,
)
from pegnet_api.tickers import Ticker

HASH = "cd" * 32


@pytest.fixture
def methods(
    mock_store: AsyncMock, mock_factom: AsyncMock, mock_settings: AppSettings
) -> ApiMethods:
    return ApiMethods(mock_store, mock_factom, mock_settings.pegnet)


def _record(height: int = 100, executed: int = 100) -> TransactionBatchRecord:
    return TransactionBatchRecord(entry_hash=HASH, height=height, timestamp=1000, executed=executed)


def test_registers_every_method(methods: ApiMethods) -> None:
    assert sorted(methods.method_map()) == [
        "get-pegnet-balances",
        "get-pegnet-issuance",
        "get-pegnet-rates",
        "get-rich-list",
        "get-sync-status",
        "get-transaction",
        "get-transaction-entry",
        "get-transaction-status",
        "get-transactions",
        "send-transaction",
    ]


class TestBalancesAndRates:
    @pytest.mark.asyncio
    async def test_balances(
        self, methods: ApiMethods, mock_store: AsyncMock, make_address: Callable[[int], str]
    ) -> None:
        mock_store.select_balances.return_value = {Ticker.PEG: 5, Ticker.pUSD: 0}
        result = await methods.get_pegnet_balances(ParamsGetPegnetBalances(address=make_address(1)))
        assert result == {"PEG": 5, "pUSD": 0}

    @pytest.mark.asyncio
    async def test_unknown_address(
        self, methods: ApiMethods, mock_store: AsyncMock, make_address: Callable[[int], str]
    ) -> None:
        mock_store.select_balances.side_effect = RecordNotFound("no balances")
        with pytest.raises(AddressNotFoundError):
            await methods.get_pegnet_balances(ParamsGetPegnetBalances(address=make_address(1)))

    @pytest.mark.asyncio
    async def test_rates(self, methods: ApiMethods, mock_store: AsyncMock) -> None:
        mock_store.select_rates.return_value = {Ticker.pUSD: 10**8}
        assert await methods.get_pegnet_rates(ParamsGetPegnetRates(height=10)) == {"pUSD": 10**8}
        mock_store.select_rates.assert_awaited_once_with(10)

    @pytest.mark.asyncio
    async def test_no_rates_is_not_found(self, methods: ApiMethods, mock_store: AsyncMock) -> None:
        mock_store.select_rates.return_value = {}
        with pytest.raises(NotFoundError):
            await methods.get_pegnet_rates(ParamsGetPegnetRates(height=10))


class TestIssuance:
    @pytest.mark.asyncio
    async def test_includes_sync_status(
        self, methods: ApiMethods, mock_store: AsyncMock, mock_factom: AsyncMock
    ) -> None:
        mock_store.select_issuances.return_value = {Ticker.PEG: 1000}
        mock_store.select_synced_height.return_value = 50
        mock_factom.get_directory_block_height.return_value = 51

        result = await methods.get_pegnet_issuance(None)

        assert result == {
            "syncstatus": {"syncheight": 50, "factomheight": 51},
            "issuance": {"PEG": 1000},
        }

    @pytest.mark.asyncio
    async def test_empty_ledger(self, methods: ApiMethods, mock_store: AsyncMock) -> None:
        mock_store.select_issuances.side_effect = RecordNotFound("no balances")
        with pytest.raises(AddressNotFoundError):
            await methods.get_pegnet_issuance(None)


class TestTransactionStatus:
    @pytest.mark.asyncio
    async def test_found(self, methods: ApiMethods, mock_store: AsyncMock) -> None:
        mock_store.select_transaction_batch.return_value = _record(executed=-1)
        result = await methods.get_transaction_status(
            ParamsGetTransactionStatus(entryhash=HASH.upper())
        )
        assert result == {"height": 100, "executed": -1}
        mock_store.select_transaction_batch.assert_awaited_once_with(HASH)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("record", [None, _record(height=0)])
    async def test_not_found(
        self, methods: ApiMethods, mock_store: AsyncMock, record: TransactionBatchRecord | None
    ) -> None:
        mock_store.select_transaction_batch.return_value = record
        with pytest.raises(TransactionNotFoundError):
            await methods.get_transaction_status(ParamsGetTransactionStatus(entryhash=HASH))


class TestTransactionLookups:
    @pytest.mark.asyncio
    async def test_transaction_decodes_batch(
        self, methods: ApiMethods, mock_store: AsyncMock, mock_factom: AsyncMock
    ) -> None:
        batch = {"version": 1, "transactions": [{"input": {"address": "FA1", "amount": 1}}]}
        mock_store.select_transaction_batch.return_value = _record()
        mock_factom.get_entry.return_value = Entry(content=json.dumps(batch).encode())

        result = await methods.get_transaction(ParamsGetTransaction(entryhash=HASH))

        assert result == {"entryhash": HASH, "timestamp": 1000, "actions": batch}
        mock_factom.get_entry.assert_awaited_once_with(bytes.fromhex(HASH))

    @pytest.mark.asyncio
    async def test_transaction_unknown_to_store(
        self, methods: ApiMethods, mock_store: AsyncMock, mock_factom: AsyncMock
    ) -> None:
        mock_store.select_transaction_batch.return_value = None
        with pytest.raises(TransactionNotFoundError):
            await methods.get_transaction(ParamsGetTransaction(entryhash=HASH))
        mock_factom.get_entry.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_entry_missing_on_chain(
        self, methods: ApiMethods, mock_store: AsyncMock, mock_factom: AsyncMock
    ) -> None:
        mock_store.select_transaction_batch.return_value = _record()
        mock_factom.get_entry.return_value = None
        with pytest.raises(TransactionNotFoundError):
            await methods.get_transaction_entry(ParamsGetTransaction(entryhash=HASH))

    @pytest.mark.asyncio
    async def test_factomd_failure_is_internal(
        self, methods: ApiMethods, mock_store: AsyncMock, mock_factom: AsyncMock
    ) -> None:
        mock_store.select_transaction_batch.return_value = _record()
        mock_factom.get_entry.side_effect = FactomClientError("timeout")
        with pytest.raises(InternalError):
            await methods.get_transaction_entry(ParamsGetTransaction(entryhash=HASH))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [b"not json", b'{"version": 1}', b"[]"])
    async def test_malformed_batch_is_internal(
        self, methods: ApiMethods, mock_store: AsyncMock, mock_factom: AsyncMock, content: bytes
    ) -> None:
        mock_store.select_transaction_batch.return_value = _record()
        mock_factom.get_entry.return_value = Entry(content=content)
        with pytest.raises(InternalError):
            await methods.get_transaction(ParamsGetTransaction(entryhash=HASH))

    @pytest.mark.asyncio
    async def test_transaction_entry(
        self, methods: ApiMethods, mock_store: AsyncMock, mock_factom: AsyncMock, chain_id: str
    ) -> None:
        entry = Entry(ext_ids=[b"\x01"], content=b"{}", chain_id=bytes.fromhex(chain_id))
        mock_store.select_transaction_batch.return_value = _record()
        mock_factom.get_entry.return_value = entry

        result = await methods.get_transaction_entry(ParamsGetTransaction(entryhash=HASH))

        assert result == entry.to_dict()
        assert result["chainid"] == chain_id
