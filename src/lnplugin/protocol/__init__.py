"""Protocol layer for lnplugin.

JSON-RPC 2.0 message models and protocol errors, with no knowledge of the
stream transport or of plugin semantics.
"""

from lnplugin.protocol.models import (
    ERROR_MESSAGES,
    JsonRpcError,
    JsonRpcErrorCode,
    JsonRpcRequest,
    JsonRpcResponse,
    create_error_response,
    create_success_response,
)
from lnplugin.protocol.exceptions import (
    ProtocolError,
    InvalidRequestError,
    MethodNotFoundError,
    InvalidParamsError,
    InternalError,
    ParseError,
)

__all__ = [
    # Models
    "ERROR_MESSAGES",
    "JsonRpcError",
    "JsonRpcErrorCode",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "create_error_response",
    "create_success_response",
    # Exceptions
    "ProtocolError",
    "InvalidRequestError",
    "MethodNotFoundError",
    "InvalidParamsError",
    "InternalError",
    "ParseError",
]
