"""Factom chain layer -- addresses, entries and the factomd client."""

from pegnet_api.factom.addresses import EntryCreditKey, is_valid_fa_address
from pegnet_api.factom.client import FactomClient
from pegnet_api.factom.entry import Entry
from pegnet_api.factom.factomd_client import FactomdClient

__all__ = ["Entry", "EntryCreditKey", "FactomClient", "FactomdClient", "is_valid_fa_address"]
