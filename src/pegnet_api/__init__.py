"""PegNet ledger JSON-RPC API."""
