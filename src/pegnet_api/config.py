"""API settings loaded from the environment and an optional .env file.

Nested groups use their own prefixes (SERVER_, DATABASE_, FACTOMD_, PEGNET_);
root-level fields (LOG_LEVEL, LOG_FORMAT) have none.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Chain ID of the PegNet transactions chain. Every entry this API submits is
# bound to it and every request carrying a chain ID must match it.
PEGNET_TRANSACTION_CHAIN_ID = (
    "cffce0f409ebba4ed236d49d89c70e4bd1f1367d86402a3363366683265a242d"
)


class ServerSettings(BaseSettings):
    """JSON-RPC HTTP server configuration."""

    model_config = SettingsConfigDict(env_prefix="SERVER_")

    host: str = "0.0.0.0"
    port: int = 8070
    path: str = "/v1"


class DatabaseSettings(BaseSettings):
    """Ledger query store location."""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    path: str = "data/pegnet.db"
    read_only: bool = False  # true when a separate sync process owns the file


class FactomSettings(BaseSettings):
    """factomd connection and entry credit funding settings."""

    model_config = SettingsConfigDict(env_prefix="FACTOMD_")

    url: str = "http://localhost:8088/v2"
    timeout_seconds: float = 10.0
    ec_private_key: SecretStr = SecretStr("")  # Es... address paying for entries


class PegnetSettings(BaseSettings):
    """Ledger-level constants exposed to validation and query logic.

    All fields configurable via PEGNET_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="PEGNET_")

    transaction_chain_id: str = PEGNET_TRANSACTION_CHAIN_ID
    history_page_limit: int = 50  # actions per get-transactions page
    rich_list_size: int = Field(default=100, ge=1, le=100)


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"
    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    factom: FactomSettings = FactomSettings()
    pegnet: PegnetSettings = PegnetSettings()
