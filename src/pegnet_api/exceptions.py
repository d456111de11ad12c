"""Custom exceptions for the PegNet API.

API errors map one-to-one onto JSON-RPC error objects. Collaborator errors
(ledger store, factomd client) live here as well to avoid circular imports
between the srv, ledger and factom packages.
"""

from typing import Any


class PegnetApiError(Exception):
    """Base exception for all PegNet API errors."""


# ──────────────────────────────────────────────
# JSON-RPC errors returned to callers
# ──────────────────────────────────────────────


class ApiError(PegnetApiError):
    """An expected failure that is returned to the caller as a JSON-RPC error.

    Subclasses fix ``code`` and ``message``; ``data`` carries the
    human-readable cause when there is one.
    """

    code: int = -32603
    message: str = "Internal error"
    default_data: Any = None

    def __init__(self, data: Any = None) -> None:
        self.data = data if data is not None else self.default_data
        super().__init__(self.message if self.data is None else f"{self.message}: {self.data}")

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error


class ParseError(ApiError):
    code = -32700
    message = "Parse error"


class InvalidRequestError(ApiError):
    code = -32600
    message = "Invalid Request"


class MethodNotFoundError(ApiError):
    code = -32601
    message = "Method not found"


class InvalidParamsError(ApiError):
    """Raised when a request payload is malformed or a field value is invalid."""

    code = -32602
    message = "Invalid params"


class InternalError(ApiError):
    """Opaque failure; never carries collaborator detail."""

    code = -32603
    message = "Internal error"


class TokenNotFoundError(ApiError):
    code = -32800
    message = "Token Not Found"
    default_data = "not yet issued or not tracked by this instance of pegnetd"


class AddressNotFoundError(ApiError):
    code = -32802
    message = "Address Not Found"
    default_data = "never received any tokens"


class TransactionNotFoundError(ApiError):
    code = -32803
    message = "Transaction Not Found"
    default_data = "no matching tx-id was found"


class InvalidTransactionError(ApiError):
    """Raised when an entry cannot be costed or is otherwise unsubmittable."""

    code = -32804
    message = "Invalid Transaction"


class NoFundingCreditsError(ApiError):
    """Raised when the funding credential cannot pay for an entry."""

    code = -32805
    message = "No EC"
    default_data = "not enough entry credits"


class NotFoundError(ApiError):
    code = -32807
    message = "Not Found"
    default_data = "no records found for the given parameters"


# ──────────────────────────────────────────────
# Collaborator errors
# ──────────────────────────────────────────────


class LedgerStoreError(PegnetApiError):
    """Raised when the ledger query store fails."""


class RecordNotFound(LedgerStoreError):
    """Raised when a store lookup matches no rows."""


class FactomClientError(PegnetApiError):
    """Raised when factomd is unreachable or answers with an error."""

    def __init__(self, message: str, code: int | None = None) -> None:
        self.code = code
        super().__init__(message)


class EntryError(PegnetApiError):
    """Raised when an entry cannot be decoded, marshalled or costed."""


class InvalidAddressError(PegnetApiError, ValueError):
    """Raised when a human-readable Factom address fails to decode."""
