"""Shared test fixtures for the PegNet API."""

from collections.abc import AsyncIterator, Callable
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from pegnet_api.config import AppSettings, FactomSettings, PegnetSettings
from pegnet_api.factom.addresses import ES_PREFIX, FA_PREFIX, encode_address
from pegnet_api.factom.client import FactomClient
from pegnet_api.ledger.database import LedgerDatabase
from pegnet_api.ledger.store import LedgerStore, SqliteLedgerStore

TEST_EC_PRIVATE_KEY = encode_address(ES_PREFIX, bytes(range(32)))


def fa_address(n: int) -> str:
    """Deterministic valid FA address for test number ``n``."""
    return encode_address(FA_PREFIX, n.to_bytes(32, "big"))


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults and a dummy funding key."""
    return AppSettings(
        log_level="DEBUG",
        factom=FactomSettings(
            url="http://factomd.test/v2",
            ec_private_key=TEST_EC_PRIVATE_KEY,  # type: ignore[arg-type]
        ),
        pegnet=PegnetSettings(),
    )


@pytest.fixture
def chain_id(mock_settings: AppSettings) -> str:
    return mock_settings.pegnet.transaction_chain_id


@pytest.fixture
def mock_store() -> AsyncMock:
    """LedgerStore mock; tests set return values per method."""
    return AsyncMock(spec=LedgerStore)


@pytest.fixture
def mock_factom() -> AsyncMock:
    """FactomClient mock; tests set return values per method."""
    return AsyncMock(spec=FactomClient)


@pytest_asyncio.fixture
async def ledger_store(tmp_path: Path) -> AsyncIterator[SqliteLedgerStore]:
    """Real SQLite store in a temporary directory."""
    async with LedgerDatabase(str(tmp_path / "pegnet.db")) as database:
        yield SqliteLedgerStore(database)


@pytest.fixture
def make_address() -> Callable[[int], str]:
    """Factory for deterministic valid FA addresses."""
    return fa_address


@pytest.fixture
def ec_private_key() -> str:
    """Es... address of the test funding key."""
    return TEST_EC_PRIVATE_KEY
