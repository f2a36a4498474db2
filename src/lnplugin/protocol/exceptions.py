"""Protocol layer exceptions.

Each exception carries its JSON-RPC error code. The transport raises or
catches them while handling a request and turns them into error responses
in one place.
"""

from __future__ import annotations

from typing import Any, ClassVar

from lnplugin.protocol.models import ERROR_MESSAGES, JsonRpcErrorCode


class ProtocolError(Exception):
    """Request handling failed; sent to the host as a JSON-RPC error.

    Args:
        message: Error message (default: the standard message for the code)
        data: Additional error data
    """

    code: ClassVar[JsonRpcErrorCode] = JsonRpcErrorCode.INTERNAL_ERROR

    def __init__(self, message: str | None = None, data: dict[str, Any] | None = None) -> None:
        self.message = message or ERROR_MESSAGES[self.code]
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class ParseError(ProtocolError):
    """The line read from the host is not valid JSON."""

    code = JsonRpcErrorCode.PARSE_ERROR


class InvalidRequestError(ProtocolError):
    """The message is JSON but not a JSON-RPC 2.0 request."""

    code = JsonRpcErrorCode.INVALID_REQUEST


class MethodNotFoundError(ProtocolError):
    """Nothing is registered under the requested method name."""

    code = JsonRpcErrorCode.METHOD_NOT_FOUND

    def __init__(self, method: str, data: dict[str, Any] | None = None) -> None:
        super().__init__(f"Method not found: {method}", data=data)
        self.method = method


class InvalidParamsError(ProtocolError):
    """Params do not fit the command."""

    code = JsonRpcErrorCode.INVALID_PARAMS


class InternalError(ProtocolError):
    """A handler failed or returned something that cannot be sent."""
