"""Sync status: local processed height versus the chain's current height."""

from pegnet_api.exceptions import FactomClientError
from pegnet_api.factom.client import FactomClient
from pegnet_api.ledger.store import LedgerStore
from pegnet_api.logging import get_logger
from pegnet_api.models import SyncStatus

logger = get_logger(__name__)

UNKNOWN_HEIGHT = -1


class SyncStatusReporter:
    """Reports sync progress; never fails because factomd is unreachable."""

    def __init__(self, store: LedgerStore, factom_client: FactomClient) -> None:
        self._store = store
        self._factom = factom_client

    async def get_sync_status(self) -> SyncStatus:
        sync_height = await self._store.select_synced_height()
        try:
            current = await self._factom.get_directory_block_height()
        except FactomClientError as e:
            logger.warning("factom_height_unavailable", error=str(e))
            current = UNKNOWN_HEIGHT
        return SyncStatus(sync_height=sync_height, current_height=current)
