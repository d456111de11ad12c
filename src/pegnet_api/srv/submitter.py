"""Transaction submission: build, cost, fund-check and submit a ledger entry.

Flow for one send-transaction request:
1. Build the entry and bind it to the transaction chain.
2. Dry run: return the entry hash without touching the funding key.
3. Under the funding key's lock: read its entry credit balance,
4. compute the entry cost (invalid-transaction if it cannot be costed),
5. reject with no-funding-credits if balance < cost,
6. commit and reveal the entry, returning the commit txid.

The lock spans steps 3-6 so two concurrent submissions against the same
key cannot both pass the balance check before either one spends.
"""

import asyncio

from pegnet_api.exceptions import (
    EntryError,
    InternalError,
    InvalidAddressError,
    InvalidTransactionError,
    NoFundingCreditsError,
)
from pegnet_api.factom.addresses import EntryCreditKey
from pegnet_api.factom.client import FactomClient
from pegnet_api.logging import get_logger
from pegnet_api.models import SubmitResult
from pegnet_api.srv.params import ParamsSendTransaction

logger = get_logger(__name__)


class TransactionSubmitter:
    """Submits entries to the transaction chain, paid by a configured EC key.

    Args:
        factom_client: Client used for balance lookups and submission.
        chain_id: Hex chain ID every submitted entry is bound to.
        ec_private_key: Es... address funding submissions ("" if unset).
    """

    def __init__(self, factom_client: FactomClient, chain_id: str, ec_private_key: str) -> None:
        self._factom = factom_client
        self._chain_id = bytes.fromhex(chain_id)
        self._ec_private_key = ec_private_key
        self._locks: dict[str, asyncio.Lock] = {}

    def _funding_key(self) -> EntryCreditKey:
        try:
            return EntryCreditKey(self._ec_private_key)
        except InvalidAddressError as e:
            logger.error("ec_private_key_invalid", error=str(e))
            raise InternalError() from e

    def _lock_for(self, key: EntryCreditKey) -> asyncio.Lock:
        # setdefault without an await in between is atomic on the event loop
        return self._locks.setdefault(key.ec_address, asyncio.Lock())

    async def send_transaction(self, params: ParamsSendTransaction) -> SubmitResult:
        entry = params.entry()
        entry.chain_id = self._chain_id
        try:
            entry_hash = entry.compute_hash()
        except EntryError as e:
            raise InvalidTransactionError(str(e)) from e

        if params.dry_run:
            logger.debug("send_transaction_dry_run", entry_hash=entry_hash.hex())
            return SubmitResult(chain_id=self._chain_id.hex(), entry_hash=entry_hash.hex())

        key = self._funding_key()
        async with self._lock_for(key):
            balance = await self._factom.get_ec_balance(key.ec_address)
            try:
                cost = entry.cost()
            except EntryError as e:
                raise InvalidTransactionError(str(e)) from e
            if balance < cost:
                logger.info(
                    "send_transaction_underfunded",
                    ec_address=key.ec_address,
                    balance=balance,
                    cost=cost,
                )
                raise NoFundingCreditsError()
            txid = await self._factom.compose_create(entry, key)

        return SubmitResult(
            chain_id=self._chain_id.hex(),
            entry_hash=entry_hash.hex(),
            txid=txid.hex(),
        )
