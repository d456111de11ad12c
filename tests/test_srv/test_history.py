"""Tests for HistoryPaginator.

Verifies:
- next_offset is offset + returned while more remain, else 0
- Selector priority is entry hash, then address, then height
- Filters and paging are forwarded to the store
- An empty page is transaction-not-found
"""

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from pegnet_api.exceptions import TransactionNotFoundError
from pegnet_api.models import ActionType, HistoryAction, HistoryQueryOptions
from pegnet_api.srv.history import HistoryPaginator, next_offset
from pegnet_api.srv.params import ParamsGetTransactions

HASH = "AB" * 32


def _actions(n: int, height: int = 100) -> list[HistoryAction]:
    return [
        HistoryAction(
            entry_hash="ab" * 32,
            tx_index=i,
            height=height,
            timestamp=0,
            executed=height,
            action_type=ActionType.COINBASE,
            from_address="",
            from_asset="",
            from_amount=0,
            to_asset="PEG",
            to_amount=1,
        )
        for i in range(n)
    ]


@pytest.mark.parametrize(
    "offset,returned,count,expected",
    [
        (0, 50, 120, 50),
        (50, 50, 120, 100),
        (100, 20, 120, 0),
        (0, 3, 3, 0),
        (0, 0, 0, 0),
    ],
)
def test_next_offset(offset: int, returned: int, count: int, expected: int) -> None:
    assert next_offset(offset, returned, count) == expected


class TestHistoryPaginator:
    @pytest.mark.asyncio
    async def test_height_with_three_actions(self, mock_store: AsyncMock) -> None:
        mock_store.select_actions_by_height.return_value = (_actions(3), 3)

        page = await HistoryPaginator(mock_store).get_transactions(
            ParamsGetTransactions(height=100)
        )

        assert page.count == 3
        assert page.next_offset == 0
        assert len(page.to_dict()["actions"]) == 3
        mock_store.select_actions_by_height.assert_awaited_once_with(
            100, HistoryQueryOptions(), 50
        )

    @pytest.mark.asyncio
    async def test_hash_wins_over_address_and_height(
        self, mock_store: AsyncMock, make_address: Callable[[int], str]
    ) -> None:
        mock_store.select_actions_by_hash.return_value = (_actions(1), 1)
        params = ParamsGetTransactions(entryhash=HASH, address=make_address(1), height=5)

        await HistoryPaginator(mock_store).get_transactions(params)

        mock_store.select_actions_by_hash.assert_awaited_once()
        assert mock_store.select_actions_by_hash.call_args.args[0] == HASH.lower()
        mock_store.select_actions_by_address.assert_not_awaited()
        mock_store.select_actions_by_height.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_address_wins_over_height(
        self, mock_store: AsyncMock, make_address: Callable[[int], str]
    ) -> None:
        mock_store.select_actions_by_address.return_value = (_actions(1), 1)

        await HistoryPaginator(mock_store).get_transactions(
            ParamsGetTransactions(address=make_address(1), height=5)
        )

        mock_store.select_actions_by_height.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_paging_and_filters_forwarded(
        self, mock_store: AsyncMock, make_address: Callable[[int], str]
    ) -> None:
        mock_store.select_actions_by_address.return_value = (_actions(10), 120)
        params = ParamsGetTransactions(
            address=make_address(1), offset=100, desc=True, conversion=True
        )

        page = await HistoryPaginator(mock_store, page_limit=10).get_transactions(params)

        assert page.next_offset == 110
        _, options, limit = mock_store.select_actions_by_address.call_args.args
        assert options == HistoryQueryOptions(offset=100, desc=True, conversion=True)
        assert limit == 10

    @pytest.mark.asyncio
    async def test_empty_page_is_not_found(self, mock_store: AsyncMock) -> None:
        mock_store.select_actions_by_height.return_value = ([], 0)
        with pytest.raises(TransactionNotFoundError):
            await HistoryPaginator(mock_store).get_transactions(ParamsGetTransactions(height=1))

    @pytest.mark.asyncio
    async def test_offset_past_end_is_not_found(self, mock_store: AsyncMock) -> None:
        mock_store.select_actions_by_height.return_value = ([], 3)
        with pytest.raises(TransactionNotFoundError):
            await HistoryPaginator(mock_store).get_transactions(
                ParamsGetTransactions(height=100, offset=50)
            )
