"""Transaction history pagination.

Resolves a history query against exactly one selector (entry hash, then
address, then height, in priority order) and computes the next-page cursor:

  next_offset = offset + len(actions)   if that is < count
  next_offset = 0                       otherwise ("no more pages")
"""

from pegnet_api.exceptions import TransactionNotFoundError
from pegnet_api.ledger.store import LedgerStore
from pegnet_api.models import HistoryPage, HistoryQueryOptions
from pegnet_api.srv.params import ParamsGetTransactions


def next_offset(offset: int, returned: int, count: int) -> int:
    end = offset + returned
    return end if end < count else 0


class HistoryPaginator:
    """Pages through transaction history actions.

    Args:
        store: Ledger query store.
        page_limit: Maximum actions per page.
    """

    def __init__(self, store: LedgerStore, page_limit: int = 50) -> None:
        self._store = store
        self._page_limit = page_limit

    async def get_transactions(self, params: ParamsGetTransactions) -> HistoryPage:
        """Return one page of actions for the selected entity.

        Raises:
            TransactionNotFoundError: If no action matches (including when
                the filters exclude every action of an existing entity).
        """
        options = HistoryQueryOptions(
            offset=params.offset,
            desc=params.desc,
            transfer=params.transfer,
            conversion=params.conversion,
            coinbase=params.coinbase,
            burn=params.burn,
        )

        if params.entry_hash is not None:
            actions, count = await self._store.select_actions_by_hash(
                params.entry_hash.lower(), options, self._page_limit
            )
        elif params.address is not None:
            actions, count = await self._store.select_actions_by_address(
                params.address, options, self._page_limit
            )
        else:
            assert params.height is not None  # enforced by ParamsGetTransactions.check
            actions, count = await self._store.select_actions_by_height(
                params.height, options, self._page_limit
            )

        if not actions:
            raise TransactionNotFoundError()

        return HistoryPage(
            actions=actions,
            count=count,
            next_offset=next_offset(options.offset, len(actions), count),
        )
