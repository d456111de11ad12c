"""Ledger query interface and its SQLite implementation.

LedgerStore is the narrow read contract request handlers depend on.
SqliteLedgerStore implements it over LedgerDatabase; its write methods are
used by the sync process that populates the store (and by tests).

CRITICAL: Balances and rates are stored as INTEGER fixed-point values keyed
by the ticker's numeric code, restored as Ticker-keyed dicts on read.
"""

import json
from abc import ABC, abstractmethod

from pegnet_api.exceptions import RecordNotFound
from pegnet_api.ledger.database import LedgerDatabase
from pegnet_api.logging import get_logger
from pegnet_api.models import (
    ActionType,
    HistoryAction,
    HistoryQueryOptions,
    TransactionBatchRecord,
    TransferOutput,
)
from pegnet_api.tickers import Ticker

logger = get_logger(__name__)


class LedgerStore(ABC):
    """Read-only query interface over balances, rates and history."""

    @abstractmethod
    async def select_synced_height(self) -> int:
        """Highest block height fully processed into local state (0 if none)."""
        ...

    @abstractmethod
    async def select_addresses(self) -> list[str]:
        """All addresses holding any balance row."""
        ...

    @abstractmethod
    async def select_balances(self, address: str) -> dict[Ticker, int]:
        """Balances of one address. Raises RecordNotFound for unknown addresses."""
        ...

    @abstractmethod
    async def select_issuances(self) -> dict[Ticker, int]:
        """Total supply per ticker. Raises RecordNotFound when the store is empty."""
        ...

    @abstractmethod
    async def select_rates(self, height: int) -> dict[Ticker, int]:
        """Rate snapshot at ``height``; empty when no rates were recorded."""
        ...

    @abstractmethod
    async def select_transaction_batch(self, entry_hash: str) -> TransactionBatchRecord | None:
        ...

    @abstractmethod
    async def select_actions_by_hash(
        self, entry_hash: str, options: HistoryQueryOptions, limit: int
    ) -> tuple[list[HistoryAction], int]:
        """Return (page of actions, total matching count)."""
        ...

    @abstractmethod
    async def select_actions_by_address(
        self, address: str, options: HistoryQueryOptions, limit: int
    ) -> tuple[list[HistoryAction], int]:
        ...

    @abstractmethod
    async def select_actions_by_height(
        self, height: int, options: HistoryQueryOptions, limit: int
    ) -> tuple[list[HistoryAction], int]:
        ...


_ACTION_COLUMNS = (
    "t.entry_hash, t.tx_index, b.height, b.timestamp, b.executed, t.action_type, "
    "t.from_address, t.from_asset, t.from_amount, t.to_asset, t.to_amount, t.outputs"
)


class SqliteLedgerStore(LedgerStore):
    """Async SQLite ledger store.

    The API only calls the read methods. The write methods populate the same
    tables for the sync process that owns the file and for test fixtures;
    no JSON-RPC method reaches them.

    Usage:
        async with LedgerDatabase("data/pegnet.db") as database:
            store = SqliteLedgerStore(database)
            balances = await store.select_balances(address)
    """

    def __init__(self, database: LedgerDatabase) -> None:
        self._database = database

    # ──────────────────────────────────────────────
    # Write methods (sync process and fixtures only)
    # ──────────────────────────────────────────────

    async def set_synced_height(self, height: int) -> None:
        await self._database.connection.execute(
            "INSERT OR REPLACE INTO pn_sync (id, synced) VALUES (1, ?)", (height,)
        )
        await self._database.connection.commit()

    async def set_balances(self, address: str, balances: dict[Ticker, int]) -> None:
        await self._database.connection.executemany(
            "INSERT OR REPLACE INTO pn_balances (address, ticker, balance) VALUES (?, ?, ?)",
            [(address, ticker.code, amount) for ticker, amount in balances.items()],
        )
        await self._database.connection.commit()

    async def insert_rates(self, height: int, rates: dict[Ticker, int]) -> None:
        await self._database.connection.executemany(
            "INSERT OR REPLACE INTO pn_rates (height, ticker, rate) VALUES (?, ?, ?)",
            [(height, ticker.code, rate) for ticker, rate in rates.items()],
        )
        await self._database.connection.commit()

    async def insert_transaction_batch(
        self,
        record: TransactionBatchRecord,
        actions: list[HistoryAction],
        blockorder: int = 0,
    ) -> None:
        """Insert a batch, its actions and the address lookup rows."""
        db = self._database.connection
        await db.execute(
            "INSERT INTO pn_history_txbatch "
            "(entry_hash, height, blockorder, timestamp, executed) VALUES (?, ?, ?, ?, ?)",
            (record.entry_hash, record.height, blockorder, record.timestamp, record.executed),
        )
        for action in actions:
            outputs = [{"address": o.address, "amount": o.amount} for o in action.outputs]
            await db.execute(
                "INSERT INTO pn_history_transaction "
                "(entry_hash, tx_index, action_type, from_address, from_asset, from_amount, "
                "to_asset, to_amount, outputs) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.entry_hash,
                    action.tx_index,
                    int(action.action_type),
                    action.from_address,
                    action.from_asset,
                    action.from_amount,
                    action.to_asset,
                    action.to_amount,
                    json.dumps(outputs),
                ),
            )
            addresses = {action.from_address, *(o.address for o in action.outputs)}
            await db.executemany(
                "INSERT OR IGNORE INTO pn_history_lookup (entry_hash, tx_index, address) "
                "VALUES (?, ?, ?)",
                [(record.entry_hash, action.tx_index, a) for a in addresses],
            )
        await db.commit()
        logger.debug(
            "inserted_transaction_batch",
            entry_hash=record.entry_hash,
            actions=len(actions),
        )

    # ──────────────────────────────────────────────
    # Read methods
    # ──────────────────────────────────────────────

    async def select_synced_height(self) -> int:
        cursor = await self._database.connection.execute("SELECT synced FROM pn_sync WHERE id = 1")
        row = await cursor.fetchone()
        return row[0] if row else 0

    async def select_addresses(self) -> list[str]:
        cursor = await self._database.connection.execute(
            "SELECT DISTINCT address FROM pn_balances ORDER BY address"
        )
        rows = await cursor.fetchall()
        return [row[0] for row in rows]

    async def select_balances(self, address: str) -> dict[Ticker, int]:
        cursor = await self._database.connection.execute(
            "SELECT ticker, balance FROM pn_balances WHERE address = ? ORDER BY ticker",
            (address,),
        )
        rows = await cursor.fetchall()
        if not rows:
            raise RecordNotFound(f"no balances for {address}")
        return {Ticker.from_code(code): balance for code, balance in rows}

    async def select_issuances(self) -> dict[Ticker, int]:
        cursor = await self._database.connection.execute(
            "SELECT ticker, SUM(balance) FROM pn_balances GROUP BY ticker ORDER BY ticker"
        )
        rows = await cursor.fetchall()
        if not rows:
            raise RecordNotFound("no issuance recorded")
        return {Ticker.from_code(code): total for code, total in rows}

    async def select_rates(self, height: int) -> dict[Ticker, int]:
        cursor = await self._database.connection.execute(
            "SELECT ticker, rate FROM pn_rates WHERE height = ? ORDER BY ticker",
            (height,),
        )
        rows = await cursor.fetchall()
        return {Ticker.from_code(code): rate for code, rate in rows}

    async def select_transaction_batch(self, entry_hash: str) -> TransactionBatchRecord | None:
        cursor = await self._database.connection.execute(
            "SELECT entry_hash, height, timestamp, executed FROM pn_history_txbatch "
            "WHERE entry_hash = ?",
            (entry_hash,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return TransactionBatchRecord(
            entry_hash=row[0], height=row[1], timestamp=row[2], executed=row[3]
        )

    async def select_actions_by_hash(
        self, entry_hash: str, options: HistoryQueryOptions, limit: int
    ) -> tuple[list[HistoryAction], int]:
        return await self._select_actions("t.entry_hash = ?", (entry_hash,), options, limit)

    async def select_actions_by_address(
        self, address: str, options: HistoryQueryOptions, limit: int
    ) -> tuple[list[HistoryAction], int]:
        return await self._select_actions(
            "EXISTS (SELECT 1 FROM pn_history_lookup l WHERE l.entry_hash = t.entry_hash "
            "AND l.tx_index = t.tx_index AND l.address = ?)",
            (address,),
            options,
            limit,
        )

    async def select_actions_by_height(
        self, height: int, options: HistoryQueryOptions, limit: int
    ) -> tuple[list[HistoryAction], int]:
        return await self._select_actions("b.height = ?", (height,), options, limit)

    async def _select_actions(
        self,
        selector: str,
        args: tuple,
        options: HistoryQueryOptions,
        limit: int,
    ) -> tuple[list[HistoryAction], int]:
        """Shared history query: same filters, ordering and paging for every selector."""
        kinds = [int(k) for k in options.action_types()]
        where = f"{selector} AND t.action_type IN ({', '.join('?' * len(kinds))})"
        from_clause = (
            "FROM pn_history_transaction t "
            "JOIN pn_history_txbatch b ON b.entry_hash = t.entry_hash"
        )
        direction = "DESC" if options.desc else "ASC"
        db = self._database.connection

        cursor = await db.execute(f"SELECT COUNT(*) {from_clause} WHERE {where}", (*args, *kinds))
        (count,) = await cursor.fetchone()

        cursor = await db.execute(
            f"SELECT {_ACTION_COLUMNS} {from_clause} WHERE {where} "
            f"ORDER BY b.height {direction}, b.blockorder {direction}, t.tx_index {direction} "
            "LIMIT ? OFFSET ?",
            (*args, *kinds, limit, options.offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_action(row) for row in rows], count

    @staticmethod
    def _row_to_action(row: tuple) -> HistoryAction:
        outputs = [TransferOutput(address=o["address"], amount=o["amount"]) for o in json.loads(row[11])]
        return HistoryAction(
            entry_hash=row[0],
            tx_index=row[1],
            height=row[2],
            timestamp=row[3],
            executed=row[4],
            action_type=ActionType(row[5]),
            from_address=row[6],
            from_asset=row[7],
            from_amount=row[8],
            to_asset=row[9],
            to_amount=row[10],
            outputs=outputs,
        )
