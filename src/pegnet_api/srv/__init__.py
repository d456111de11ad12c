"""JSON-RPC serving layer -- parameter validation, dispatch and workflows."""

from pegnet_api.srv.app import create_app
from pegnet_api.srv.dispatcher import RequestDispatcher, RpcOutcome
from pegnet_api.srv.methods import ApiMethods

__all__ = ["ApiMethods", "RequestDispatcher", "RpcOutcome", "create_app"]
