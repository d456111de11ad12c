"""FastAPI application serving the JSON-RPC 2.0 endpoint.

Handles envelope framing only (parse errors, invalid requests, batches and
notifications); method semantics live in the dispatcher.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from pegnet_api.exceptions import ApiError, InvalidRequestError, ParseError
from pegnet_api.logging import get_logger
from pegnet_api.srv.dispatcher import RequestDispatcher

log = get_logger(__name__)

_MISSING = object()


def _response(request_id: Any, *, result: Any = None, error: ApiError | None = None) -> dict:
    body: dict[str, Any] = {"jsonrpc": "2.0", "id": request_id}
    if error is not None:
        body["error"] = error.to_dict()
    else:
        body["result"] = result
    return body


async def _handle_one(dispatcher: RequestDispatcher, message: Any) -> dict | None:
    """Run one request object. Returns None for notifications."""
    if not isinstance(message, dict):
        return _response(None, error=InvalidRequestError("request must be an object"))

    request_id = message.get("id", _MISSING)
    if message.get("jsonrpc") != "2.0" or not isinstance(message.get("method"), str):
        rid = None if request_id is _MISSING else request_id
        return _response(rid, error=InvalidRequestError('"jsonrpc" must be "2.0" and "method" a string'))
    valid_id = request_id is _MISSING or request_id is None or (
        isinstance(request_id, (str, int)) and not isinstance(request_id, bool)
    )
    if not valid_id:
        return _response(None, error=InvalidRequestError('"id" must be a string, number or null'))

    with structlog.contextvars.bound_contextvars(
        request_id=None if request_id is _MISSING else request_id
    ):
        outcome = await dispatcher.dispatch(message["method"], message.get("params"))

    if request_id is _MISSING:
        return None
    if outcome.ok:
        return _response(request_id, result=outcome.result)
    return _response(request_id, error=outcome.error)


def create_app(dispatcher: RequestDispatcher | None = None, path: str = "/v1", lifespan: Any = None) -> FastAPI:
    """Create the JSON-RPC FastAPI application.

    Args:
        dispatcher: Request dispatcher; may be None when a lifespan installs
            one on ``app.state.dispatcher`` at startup.
        path: URL path of the JSON-RPC endpoint.
        lifespan: Optional async context manager for startup/shutdown.
    """
    app = FastAPI(title="PegNet API", lifespan=lifespan)
    app.state.dispatcher = dispatcher

    @app.post(path)
    async def handle_rpc(request: Request) -> Response:
        dispatcher: RequestDispatcher = request.app.state.dispatcher
        raw = await request.body()
        try:
            message = json.loads(raw)
        except ValueError as e:
            log.debug("rpc_parse_error", error=str(e))
            return JSONResponse(content=_response(None, error=ParseError(str(e))))

        if isinstance(message, list):
            if not message:
                return JSONResponse(content=_response(None, error=InvalidRequestError("empty batch")))
            replies = await asyncio.gather(*(_handle_one(dispatcher, m) for m in message))
            replies = [r for r in replies if r is not None]
            if not replies:
                return Response(status_code=204)
            return JSONResponse(content=replies)

        reply = await _handle_one(dispatcher, message)
        if reply is None:
            return Response(status_code=204)
        return JSONResponse(content=reply)

    return app
