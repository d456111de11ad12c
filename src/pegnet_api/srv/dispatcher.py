"""Request dispatcher: method lookup, parameter validation and outcome tagging.

Every call produces an RpcOutcome that is either a success (wire-ready
result) or a failure (ApiError). Unexpected exceptions are logged with full
detail and reported as an opaque internal error; a failing request never
escapes the dispatcher.
"""

from dataclasses import dataclass
from typing import Any

import structlog

from pegnet_api.exceptions import ApiError, InternalError, MethodNotFoundError
from pegnet_api.logging import get_logger
from pegnet_api.srv.methods import Method
from pegnet_api.srv.params import decode_params

logger = get_logger(__name__)


@dataclass(frozen=True)
class RpcOutcome:
    """Tagged result of one call: exactly one of ``result`` / ``error`` applies."""

    ok: bool
    result: Any = None
    error: ApiError | None = None

    @classmethod
    def success(cls, result: Any) -> "RpcOutcome":
        return cls(ok=True, result=result)

    @classmethod
    def failure(cls, error: ApiError) -> "RpcOutcome":
        return cls(ok=False, error=error)


class RequestDispatcher:
    """Routes method calls to handlers.

    Args:
        methods: Method name to handler/parameter-type mapping.
        chain_id: The single recognized transaction chain ID.
    """

    def __init__(self, methods: dict[str, Method], chain_id: str) -> None:
        self._methods = methods
        self._chain_id = chain_id

    @property
    def method_names(self) -> list[str]:
        return sorted(self._methods)

    async def dispatch(self, method: str, payload: Any = None) -> RpcOutcome:
        entry = self._methods.get(method)
        if entry is None:
            return RpcOutcome.failure(MethodNotFoundError(method))

        with structlog.contextvars.bound_contextvars(rpc_method=method):
            try:
                params = decode_params(entry.params_type, payload, self._chain_id)
                result = await entry.handler(params)
            except ApiError as e:
                logger.debug("rpc_error", code=e.code, data=e.data)
                return RpcOutcome.failure(e)
            except Exception:
                logger.exception("rpc_internal_error")
                return RpcOutcome.failure(InternalError())

        return RpcOutcome.success(result)
