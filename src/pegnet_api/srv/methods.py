"""JSON-RPC method handlers.

Each handler receives its already-validated parameter object (or None) and
returns a wire-ready result, raising ApiError subclasses for expected
failures. Collaborator errors that are not translated here propagate to the
dispatcher, which reports them as internal errors.
"""

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pegnet_api.config import PegnetSettings
from pegnet_api.exceptions import (
    AddressNotFoundError,
    FactomClientError,
    InternalError,
    NotFoundError,
    RecordNotFound,
    TransactionNotFoundError,
)
from pegnet_api.factom.client import FactomClient
from pegnet_api.factom.entry import Entry
from pegnet_api.ledger.store import LedgerStore
from pegnet_api.logging import get_logger
from pegnet_api.models import TransactionBatchRecord
from pegnet_api.srv.history import HistoryPaginator
from pegnet_api.srv.params import (
    Params,
    ParamsGetPegnetBalances,
    ParamsGetPegnetRates,
    ParamsGetTransaction,
    ParamsGetTransactions,
    ParamsGetTransactionStatus,
    ParamsSendTransaction,
)
from pegnet_api.srv.rich_list import BalanceAggregator
from pegnet_api.srv.submitter import TransactionSubmitter
from pegnet_api.srv.sync_status import SyncStatusReporter
from pegnet_api.tickers import encode_ticker_map

logger = get_logger(__name__)

Handler = Callable[[Any], Awaitable[Any]]


@dataclass(frozen=True)
class Method:
    """A registered method: its handler and declared parameter type."""

    handler: Handler
    params_type: type[Params] | None = None


class ApiMethods:
    """Request handlers over the ledger store and the factomd client.

    Args:
        store: Ledger query store.
        factom_client: External chain client.
        settings: Ledger-level constants (chain ID, page sizes).
        ec_private_key: Es... address funding send-transaction.
    """

    def __init__(
        self,
        store: LedgerStore,
        factom_client: FactomClient,
        settings: PegnetSettings,
        ec_private_key: str = "",
    ) -> None:
        self._store = store
        self._factom = factom_client
        self._aggregator = BalanceAggregator(store, size=settings.rich_list_size)
        self._paginator = HistoryPaginator(store, page_limit=settings.history_page_limit)
        self._submitter = TransactionSubmitter(
            factom_client, settings.transaction_chain_id, ec_private_key
        )
        self._sync = SyncStatusReporter(store, factom_client)

    def method_map(self) -> dict[str, Method]:
        return {
            "get-rich-list": Method(self.get_rich_list),
            "get-transactions": Method(self.get_transactions, ParamsGetTransactions),
            "get-transaction-status": Method(
                self.get_transaction_status, ParamsGetTransactionStatus
            ),
            "get-transaction": Method(self.get_transaction, ParamsGetTransaction),
            "get-transaction-entry": Method(self.get_transaction_entry, ParamsGetTransaction),
            "get-pegnet-balances": Method(self.get_pegnet_balances, ParamsGetPegnetBalances),
            "get-pegnet-issuance": Method(self.get_pegnet_issuance),
            "send-transaction": Method(self.send_transaction, ParamsSendTransaction),
            "get-sync-status": Method(self.get_sync_status),
            "get-pegnet-rates": Method(self.get_pegnet_rates, ParamsGetPegnetRates),
        }

    # ──────────────────────────────────────────────
    # Workflows
    # ──────────────────────────────────────────────

    async def get_rich_list(self, _: None) -> dict:
        return (await self._aggregator.rich_list()).to_dict()

    async def get_transactions(self, params: ParamsGetTransactions) -> dict:
        return (await self._paginator.get_transactions(params)).to_dict()

    async def send_transaction(self, params: ParamsSendTransaction) -> dict:
        return (await self._submitter.send_transaction(params)).to_dict()

    async def get_sync_status(self, _: None) -> dict:
        return (await self._sync.get_sync_status()).to_dict()

    # ──────────────────────────────────────────────
    # Lookups
    # ──────────────────────────────────────────────

    async def get_transaction_status(self, params: ParamsGetTransactionStatus) -> dict:
        record = await self._store.select_transaction_batch(params.entry_hash.lower())
        if record is None or record.height == 0:
            raise TransactionNotFoundError()
        return {"height": record.height, "executed": record.executed}

    async def get_transaction(self, params: ParamsGetTransaction) -> dict:
        """Stored transaction with its decoded transaction batch."""
        record, entry = await self._fetch_entry(params.entry_hash.lower())
        try:
            batch = json.loads(entry.content)
        except ValueError as e:
            logger.error("transaction_batch_undecodable", entry_hash=record.entry_hash, error=str(e))
            raise InternalError() from e
        if not isinstance(batch, dict) or not isinstance(batch.get("transactions"), list):
            logger.error("transaction_batch_malformed", entry_hash=record.entry_hash)
            raise InternalError()
        return {
            "entryhash": record.entry_hash,
            "timestamp": record.timestamp,
            "actions": batch,
        }

    async def get_transaction_entry(self, params: ParamsGetTransaction) -> dict:
        """Raw entry as stored on chain."""
        _, entry = await self._fetch_entry(params.entry_hash.lower())
        return entry.to_dict()

    async def _fetch_entry(self, entry_hash: str) -> tuple[TransactionBatchRecord, Entry]:
        record = await self._store.select_transaction_batch(entry_hash)
        if record is None:
            raise TransactionNotFoundError()
        try:
            entry = await self._factom.get_entry(bytes.fromhex(entry_hash))
        except FactomClientError as e:
            logger.error("factom_entry_fetch_failed", entry_hash=entry_hash, error=str(e))
            raise InternalError() from e
        if entry is None:
            raise TransactionNotFoundError()
        return record, entry

    async def get_pegnet_balances(self, params: ParamsGetPegnetBalances) -> dict:
        try:
            balances = await self._store.select_balances(params.address)
        except RecordNotFound:
            raise AddressNotFoundError() from None
        return encode_ticker_map(balances)

    async def get_pegnet_issuance(self, _: None) -> dict:
        try:
            issuance = await self._store.select_issuances()
        except RecordNotFound:
            raise AddressNotFoundError() from None
        sync_status = await self._sync.get_sync_status()
        return {"syncstatus": sync_status.to_dict(), "issuance": encode_ticker_map(issuance)}

    async def get_pegnet_rates(self, params: ParamsGetPegnetRates) -> dict:
        rates = await self._store.select_rates(params.height)
        if not rates:
            raise NotFoundError()
        return encode_ticker_map(rates)
