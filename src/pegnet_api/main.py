"""Entry point for the PegNet JSON-RPC API.

Wires the ledger store, the factomd client and the request dispatcher into
the FastAPI application and serves it with uvicorn's programmatic API.
Store and client lifecycles are bound to FastAPI's lifespan.

Component wiring order (in lifespan):
1. LedgerDatabase + SqliteLedgerStore (query store)
2. FactomdClient (external chain)
3. ApiMethods (workflows and lookups)
4. RequestDispatcher (method map + validation)
"""

import asyncio
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from pegnet_api.config import AppSettings
from pegnet_api.factom.factomd_client import FactomdClient
from pegnet_api.ledger.database import LedgerDatabase
from pegnet_api.ledger.store import SqliteLedgerStore
from pegnet_api.logging import get_logger, setup_logging
from pegnet_api.srv.app import create_app
from pegnet_api.srv.dispatcher import RequestDispatcher
from pegnet_api.srv.methods import ApiMethods


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store and factomd client on startup, close them on shutdown."""
    logger = get_logger("pegnet_api.main")
    settings: AppSettings = app.state.settings

    database = LedgerDatabase(settings.database.path, read_only=settings.database.read_only)
    await database.connect()
    factom_client = FactomdClient(settings.factom)

    methods = ApiMethods(
        store=SqliteLedgerStore(database),
        factom_client=factom_client,
        settings=settings.pegnet,
        ec_private_key=settings.factom.ec_private_key.get_secret_value(),
    )
    app.state.dispatcher = RequestDispatcher(
        methods.method_map(), settings.pegnet.transaction_chain_id
    )

    if not settings.factom.ec_private_key.get_secret_value():
        logger.warning(
            "no_ec_private_key_configured",
            note="send-transaction only works with dryrun=true",
        )
    logger.info("lifespan_started", methods=app.state.dispatcher.method_names)

    try:
        yield
    finally:
        await factom_client.close()
        await database.close()
        logger.info("pegnet_api_stopped")


async def run() -> None:
    """Run the JSON-RPC server until interrupted."""
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("pegnet_api.main")

    app = create_app(path=settings.server.path, lifespan=lifespan)
    app.state.settings = settings

    logger.info(
        "starting_api_server",
        host=settings.server.host,
        port=settings.server.port,
        path=settings.server.path,
    )

    config = uvicorn.Config(
        app,
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,
    )
    server = uvicorn.Server(config)
    await server.serve()


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
