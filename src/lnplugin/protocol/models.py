"""JSON-RPC 2.0 protocol models.

Pydantic models for the messages exchanged with the host process. The host
may send params as an object or an array; the plugin always answers with a
single response object per request.

References:
    JSON-RPC 2.0 Specification: https://www.jsonrpc.org/specification
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class JsonRpcErrorCode(int, Enum):
    """Standard JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


ERROR_MESSAGES: dict[JsonRpcErrorCode, str] = {
    JsonRpcErrorCode.PARSE_ERROR: "Parse error",
    JsonRpcErrorCode.INVALID_REQUEST: "Invalid Request",
    JsonRpcErrorCode.METHOD_NOT_FOUND: "Method not found",
    JsonRpcErrorCode.INVALID_PARAMS: "Invalid params",
    JsonRpcErrorCode.INTERNAL_ERROR: "Internal error",
}


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object.

    Example:
        >>> error = JsonRpcError(code=-32600, message="Invalid Request")
        >>> print(error.code)
        -32600
    """

    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: dict[str, Any] | None = Field(default=None, description="Additional error data")


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request object.

    A request without ``id`` is a notification. The transport only leaves
    it unanswered when the method is a registered notification topic.
    """

    jsonrpc: Literal["2.0"] = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to invoke")
    params: dict[str, Any] | list[Any] | None = Field(
        default=None, description="Method parameters (object or array)"
    )
    id: int | str | None = Field(default=None, description="Request ID")

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        """Validate method name is not empty."""
        if not v:
            raise ValueError("Method name must be a non-empty string")
        return v

    @property
    def is_notification(self) -> bool:
        """Check if the request was sent without an id."""
        return self.id is None


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response object.

    Exactly one of ``result`` and ``error`` is set. ``result`` may be any
    JSON value, so presence is tracked on the error side.
    """

    jsonrpc: Literal["2.0"] = Field(default="2.0", description="JSON-RPC version")
    result: Any = Field(default=None, description="Method result")
    error: JsonRpcError | None = Field(default=None, description="Error object")
    id: int | str | None = Field(default=None, description="Request ID")

    def to_wire(self) -> dict[str, Any]:
        """Return the dict sent on the wire.

        ``id`` is always present (null when unknown); ``result`` and
        ``error`` are mutually exclusive.
        """
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump(exclude_none=True)
        else:
            data["result"] = self.result
        return data


def create_error_response(
    request_id: int | str | None,
    error_code: JsonRpcErrorCode,
    message: str | None = None,
    data: dict[str, Any] | None = None,
) -> JsonRpcResponse:
    """Create a standard JSON-RPC error response."""
    error_message = message or ERROR_MESSAGES.get(error_code, "Server error")

    return JsonRpcResponse(
        id=request_id,
        error=JsonRpcError(code=error_code.value, message=error_message, data=data),
    )


def create_success_response(request_id: int | str | None, result: Any) -> JsonRpcResponse:
    """Create a successful JSON-RPC response."""
    return JsonRpcResponse(id=request_id, result=result)
