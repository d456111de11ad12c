"""Rich list: rank addresses by USD-equivalent net worth.

Core formula (per address, at the current sync height):
  usd_total = sum(amount * rate[ticker] // rate[pUSD])   (integer, 1e-8 USD)
  usd_equiv = usd_total / 1e8                             (Decimal, for output only)

This is a full O(addresses x tickers) scan with no caching; the per-address
balance fetch dominates its cost.
"""

from pegnet_api.conversions import ConversionError, convert, to_decimal
from pegnet_api.exceptions import InternalError
from pegnet_api.ledger.store import LedgerStore
from pegnet_api.logging import get_logger
from pegnet_api.models import RichEntry, RichList
from pegnet_api.tickers import USD_TICKER, Ticker

logger = get_logger(__name__)


def usd_value(balances: dict[Ticker, int], rates: dict[Ticker, int]) -> int:
    """Total fixed-point USD value of a balance map.

    Tickers without a usable rate contribute nothing.
    """
    usd_rate = rates.get(USD_TICKER, 0)
    total = 0
    for ticker, amount in balances.items():
        try:
            total += convert(amount, rates.get(ticker, 0), usd_rate)
        except ConversionError as e:
            logger.debug("rich_list_conversion_skipped", ticker=ticker.value, error=str(e))
    return total


class BalanceAggregator:
    """Ranks addresses by total USD-equivalent balance.

    Args:
        store: Ledger query store.
        size: Maximum number of ranked entries returned.
    """

    def __init__(self, store: LedgerStore, size: int = 100) -> None:
        self._store = store
        self._size = size

    async def rich_list(self) -> RichList:
        """Compute the ranked rich list at the current sync height.

        Raises:
            InternalError: If no rates exist at the sync height.
        """
        height = await self._store.select_synced_height()
        addresses = await self._store.select_addresses()
        rates = await self._store.select_rates(height)
        if not rates:
            logger.error("rich_list_rates_missing", height=height)
            raise InternalError()

        entries: list[RichEntry] = []
        for address in addresses:
            balances = await self._store.select_balances(address)
            total = usd_value(balances, rates)
            if total == 0:
                continue
            entries.append(RichEntry(address=address, usd_equiv=to_decimal(total)))

        # list.sort is stable: equal values keep store order
        entries.sort(key=lambda e: e.usd_equiv, reverse=True)

        logger.debug("rich_list_computed", height=height, ranked=len(entries))
        return RichList(height=height, top=entries[: self._size])
