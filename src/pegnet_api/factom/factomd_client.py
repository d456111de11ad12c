"""factomd JSON-RPC client implementation via httpx async.

Wraps the factomd v2 API methods the PegNet API needs. Transport failures
and JSON-RPC errors are both surfaced as FactomClientError.
"""

from typing import Any

import httpx

from pegnet_api.config import FactomSettings
from pegnet_api.exceptions import FactomClientError
from pegnet_api.factom.addresses import EntryCreditKey
from pegnet_api.factom.client import FactomClient
from pegnet_api.factom.entry import Entry, build_commit
from pegnet_api.logging import get_logger

logger = get_logger(__name__)

# factomd error codes meaning "no such object"
_NOT_FOUND_CODES = {-32008, -32009}


class FactomdClient(FactomClient):
    """Concrete factomd client using an httpx.AsyncClient."""

    def __init__(
        self,
        settings: FactomSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._http = httpx.AsyncClient(
            timeout=settings.timeout_seconds,
            transport=transport,
        )
        self._request_id = 0

    async def close(self) -> None:
        await self._http.aclose()
        logger.info("factomd_client_closed", url=self._settings.url)

    async def _call(self, method: str, params: dict | None = None) -> Any:
        self._request_id += 1
        payload: dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
        }
        if params is not None:
            payload["params"] = params

        try:
            response = await self._http.post(self._settings.url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as e:
            logger.warning("factomd_request_failed", method=method, error=str(e))
            raise FactomClientError(f"{method}: {e}") from e
        except ValueError as e:
            raise FactomClientError(f"{method}: invalid JSON response") from e

        if not isinstance(body, dict):
            raise FactomClientError(f"{method}: response is not a JSON object")
        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                raise FactomClientError(f"{method}: malformed error: {error!r}")
            raise FactomClientError(
                f"{method}: {error.get('message')} ({error.get('data')})",
                code=error.get("code"),
            )
        return body.get("result")

    async def get_directory_block_height(self) -> int:
        result = await self._call("heights")
        try:
            return int(result["directoryblockheight"])
        except (TypeError, KeyError, ValueError) as e:
            raise FactomClientError(f"heights: malformed result {result!r}") from e

    async def get_ec_balance(self, ec_address: str) -> int:
        result = await self._call("entry-credit-balance", {"address": ec_address})
        try:
            return int(result["balance"])
        except (TypeError, KeyError, ValueError) as e:
            raise FactomClientError(f"entry-credit-balance: malformed result {result!r}") from e

    async def get_entry(self, entry_hash: bytes) -> Entry | None:
        try:
            result = await self._call("entry", {"hash": entry_hash.hex()})
        except FactomClientError as e:
            if e.code in _NOT_FOUND_CODES:
                return None
            raise
        if not result:
            return None
        try:
            return Entry(
                ext_ids=[bytes.fromhex(x) for x in result.get("extids") or []],
                content=bytes.fromhex(result.get("content") or ""),
                chain_id=bytes.fromhex(result["chainid"]),
            )
        except (KeyError, ValueError) as e:
            raise FactomClientError(f"entry: malformed result {result!r}") from e

    async def compose_create(self, entry: Entry, key: EntryCreditKey) -> bytes:
        commit = build_commit(entry, key)
        await self._call("commit-entry", {"message": commit.message.hex()})
        await self._call("reveal-entry", {"entry": entry.marshal_binary().hex()})
        logger.info(
            "entry_submitted",
            entry_hash=entry.compute_hash().hex(),
            txid=commit.txid.hex(),
            ec_address=key.ec_address,
        )
        return commit.txid
