"""SQLite schema and connection lifecycle for the ledger query store.

Balances and rates are keyed by ticker code. History is stored per
transaction batch (one entry), per action within the batch, and as an
address lookup table covering both senders and transfer receivers.
"""

import os
from typing import Self

import aiosqlite

from pegnet_api.exceptions import LedgerStoreError
from pegnet_api.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1
BUSY_TIMEOUT_MS = 5000

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS pn_sync (
    id INTEGER PRIMARY KEY CHECK (id = 1),
    synced INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS pn_balances (
    address TEXT NOT NULL,
    ticker INTEGER NOT NULL,
    balance INTEGER NOT NULL CHECK (balance >= 0),
    PRIMARY KEY (address, ticker)
);

CREATE TABLE IF NOT EXISTS pn_rates (
    height INTEGER NOT NULL,
    ticker INTEGER NOT NULL,
    rate INTEGER NOT NULL,
    PRIMARY KEY (height, ticker)
);

CREATE TABLE IF NOT EXISTS pn_history_txbatch (
    entry_hash TEXT PRIMARY KEY,
    height INTEGER NOT NULL,
    blockorder INTEGER NOT NULL,
    timestamp INTEGER NOT NULL,
    executed INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS pn_history_transaction (
    entry_hash TEXT NOT NULL REFERENCES pn_history_txbatch(entry_hash),
    tx_index INTEGER NOT NULL,
    action_type INTEGER NOT NULL,
    from_address TEXT NOT NULL,
    from_asset TEXT NOT NULL,
    from_amount INTEGER NOT NULL,
    to_asset TEXT NOT NULL DEFAULT '',
    to_amount INTEGER NOT NULL DEFAULT 0,
    outputs TEXT NOT NULL DEFAULT '[]',
    PRIMARY KEY (entry_hash, tx_index)
);

CREATE TABLE IF NOT EXISTS pn_history_lookup (
    entry_hash TEXT NOT NULL,
    tx_index INTEGER NOT NULL,
    address TEXT NOT NULL,
    PRIMARY KEY (entry_hash, tx_index, address)
);
"""

_CREATE_INDEXES_SQL = """
CREATE INDEX IF NOT EXISTS idx_txbatch_height
    ON pn_history_txbatch(height, blockorder);

CREATE INDEX IF NOT EXISTS idx_lookup_address
    ON pn_history_lookup(address);
"""


class LedgerDatabase:
    """Connection to the ledger query store.

    The sync process owns the file and writes it; the API normally opens it
    with ``read_only=True`` and only reads. A writable connection creates
    the schema on first use.

    Usage:
        async with LedgerDatabase("data/pegnet.db", read_only=True) as database:
            cursor = await database.connection.execute("SELECT synced FROM pn_sync")
    """

    def __init__(self, path: str = "data/pegnet.db", read_only: bool = False) -> None:
        self._path = path
        self._read_only = read_only
        self._connection: aiosqlite.Connection | None = None

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise LedgerStoreError(f"ledger database {self._path} is not open")
        return self._connection

    async def connect(self) -> None:
        """Open the connection and verify (or create) the schema.

        Raises:
            LedgerStoreError: If the file cannot be opened or was written by
                an incompatible schema version.
        """
        try:
            if self._read_only:
                self._connection = await aiosqlite.connect(
                    f"file:{self._path}?mode=ro", uri=True
                )
            else:
                parent = os.path.dirname(self._path)
                if parent:
                    os.makedirs(parent, exist_ok=True)
                self._connection = await aiosqlite.connect(self._path)
                await self._connection.execute("PRAGMA journal_mode=WAL")

            await self._connection.execute(f"PRAGMA busy_timeout={BUSY_TIMEOUT_MS}")
            if not self._read_only:
                await self._create_schema()
            await self._check_schema_version()
        except aiosqlite.Error as e:
            await self.close()
            raise LedgerStoreError(f"cannot open ledger database {self._path}: {e}") from e
        except LedgerStoreError:
            await self.close()
            raise

        logger.info("ledger_db_connected", path=self._path, read_only=self._read_only)

    async def close(self) -> None:
        if self._connection is None:
            return
        await self._connection.close()
        self._connection = None
        logger.info("ledger_db_closed", path=self._path)

    async def _create_schema(self) -> None:
        conn = self.connection
        await conn.executescript(_CREATE_TABLES_SQL)
        await conn.executescript(_CREATE_INDEXES_SQL)
        await conn.execute(
            "INSERT INTO schema_version (version) SELECT ? "
            "WHERE NOT EXISTS (SELECT 1 FROM schema_version)",
            (SCHEMA_VERSION,),
        )
        await conn.commit()

    async def _check_schema_version(self) -> None:
        cursor = await self.connection.execute("SELECT MAX(version) FROM schema_version")
        row = await cursor.fetchone()
        version = row[0] if row else None
        if version != SCHEMA_VERSION:
            raise LedgerStoreError(
                f"ledger schema version {version} is not supported (expected {SCHEMA_VERSION})"
            )

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
