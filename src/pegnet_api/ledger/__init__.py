"""Ledger query store -- balances, rates and transaction history in SQLite."""

from pegnet_api.ledger.database import LedgerDatabase
from pegnet_api.ledger.store import LedgerStore, SqliteLedgerStore

__all__ = ["LedgerDatabase", "LedgerStore", "SqliteLedgerStore"]
