"""Abstract Factom client interface.

Defines the contract the API needs from the external chain: heights, entry
credit balances, entry lookups and entry submission. Request handlers depend
only on this interface, keeping factomd wire details isolated in the
concrete implementation.
"""

from abc import ABC, abstractmethod

from pegnet_api.factom.addresses import EntryCreditKey
from pegnet_api.factom.entry import Entry


class FactomClient(ABC):
    """Abstract base class for Factom node clients.

    All methods raise FactomClientError when the node is unreachable or
    answers with an error.
    """

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources."""
        ...

    @abstractmethod
    async def get_directory_block_height(self) -> int:
        """Return the node's current directory block height."""
        ...

    @abstractmethod
    async def get_ec_balance(self, ec_address: str) -> int:
        """Return the entry credit balance of a public EC address."""
        ...

    @abstractmethod
    async def get_entry(self, entry_hash: bytes) -> Entry | None:
        """Fetch an entry by hash. Returns None if the node does not know it."""
        ...

    @abstractmethod
    async def compose_create(self, entry: Entry, key: EntryCreditKey) -> bytes:
        """Commit and reveal ``entry`` paid by ``key``; return the commit txid."""
        ...
