"""Line-delimited JSON-RPC 2.0 server over a pair of streams.

Reads one JSON-RPC message per line from the input stream, dispatches it to
the handler registered under the method name, and writes each response as a
single JSON document followed by a blank line. It has no knowledge of the
plugin handshake: the plugin controller registers handlers like any other.

Requests are processed one at a time in a single event loop, so a handler
always completes before the next request is read. Every request gets an
answer, with a null id when the host sent none, except id-less messages for
names registered as notification topics.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any, TextIO

import structlog
from pydantic import BaseModel, ValidationError

from lnplugin.exceptions import DuplicateNameError, NotFoundError
from lnplugin.methods import JsonRpcHandler
from lnplugin.protocol.exceptions import (
    InternalError,
    InvalidParamsError,
    InvalidRequestError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
)
from lnplugin.protocol.models import (
    JsonRpcRequest,
    JsonRpcResponse,
    create_error_response,
    create_success_response,
)

logger = structlog.get_logger()

MESSAGE_TERMINATOR = "\n\n"


class StdioJsonRpcServer:
    """JSON-RPC 2.0 server for line-delimited streams.

    Handlers receive the raw request params (object, array or None) and may
    return a value or an awaitable. Pydantic models returned by handlers are
    dumped to JSON by alias.

    Example:
        >>> server = StdioJsonRpcServer()
        >>> server.register("ping", lambda params: "pong")
        >>> server.run(sys.stdin, sys.stdout)
    """

    def __init__(self) -> None:
        self.methods: dict[str, JsonRpcHandler] = {}
        self.notifications: set[str] = set()

    def register(
        self, name: str, handler: JsonRpcHandler, notification: bool = False
    ) -> None:
        """Register a handler under a method name.

        Args:
            name: Method name
            handler: Callable receiving the request params
            notification: Name is a notification topic; id-less messages
                for it are never answered

        Raises:
            DuplicateNameError: If the name is already registered
        """
        if name in self.methods:
            raise DuplicateNameError("method", name)
        self.methods[name] = handler
        if notification:
            self.notifications.add(name)
        logger.debug("jsonrpc_method_registered", method=name, notification=notification)

    def unregister(self, name: str) -> None:
        """Unregister a method handler.

        Raises:
            NotFoundError: If the name is not registered
        """
        if name not in self.methods:
            raise NotFoundError("method", name)
        del self.methods[name]
        self.notifications.discard(name)
        logger.debug("jsonrpc_method_unregistered", method=name)

    def has(self, name: str) -> bool:
        return name in self.methods

    def run(self, instream: TextIO, outstream: TextIO) -> None:
        """Serve requests until the input stream is closed. Blocks."""
        asyncio.run(self.serve(instream, outstream))

    async def serve(self, instream: TextIO, outstream: TextIO) -> None:
        """Read, dispatch and answer requests until EOF on instream."""
        loop = asyncio.get_running_loop()
        logger.info("transport_started", methods=len(self.methods))

        while True:
            line = await loop.run_in_executor(None, instream.readline)
            if not line:
                break
            if not line.strip():
                continue

            response = await self.process_raw_message(line)
            if response is not None:
                outstream.write(response + MESSAGE_TERMINATOR)
                outstream.flush()

        logger.info("transport_stopped")

    async def process_raw_message(self, raw_data: str | bytes) -> str | None:
        """Process a raw JSON-RPC message.

        Args:
            raw_data: Raw JSON string or bytes

        Returns:
            JSON response string, or None for notifications
        """
        try:
            if isinstance(raw_data, bytes):
                raw_data = raw_data.decode("utf-8")
            parsed_data = json.loads(raw_data)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("jsonrpc_parse_error", error=str(e))
            error_response = self._error_response(None, ParseError(data={"details": str(e)}))
            return json.dumps(error_response.to_wire())

        payload = await self.process_message(parsed_data)
        if payload is None:
            return None

        try:
            return json.dumps(payload)
        except (TypeError, ValueError) as e:
            logger.error("jsonrpc_result_not_serializable", error=str(e))
            request_id = parsed_data.get("id") if isinstance(parsed_data, dict) else None
            error = InternalError(data={"details": f"Result is not JSON serializable: {e}"})
            return json.dumps(self._error_response(request_id, error).to_wire())

    async def process_message(self, data: Any) -> dict[str, Any] | list[dict[str, Any]] | None:
        """Process a parsed JSON-RPC message (single request or batch).

        Returns:
            Wire-ready response payload, or None when nothing is to be sent
        """
        if isinstance(data, list):
            return await self._process_batch(data)

        response = await self._process_single_request(data)
        if response is None:
            return None
        return response.to_wire()

    async def _process_batch(self, batch_data: list[Any]) -> list[dict[str, Any]] | None:
        """Process a batch of requests in order."""
        if not batch_data:
            return [self._error_response(None, InvalidRequestError("Empty batch")).to_wire()]

        responses = []
        for request_data in batch_data:
            response = await self._process_single_request(request_data)
            if response is not None:
                responses.append(response.to_wire())

        return responses or None

    async def _process_single_request(self, request_data: Any) -> JsonRpcResponse | None:
        """Process a single JSON-RPC request.

        Every request is answered (with a null id when none was sent),
        except an id-less message to a registered notification topic.
        """
        if not isinstance(request_data, dict):
            error = InvalidRequestError(data={"details": "Request must be a JSON object"})
            return self._error_response(None, error)

        request_id = request_data.get("id")

        try:
            request = JsonRpcRequest(**request_data)
        except ValidationError as e:
            logger.error("jsonrpc_invalid_request", error=str(e), request_id=request_id)
            error = InvalidRequestError(
                data={"validation_errors": json.loads(e.json(include_url=False))}
            )
            return self._error_response(request_id, error)

        silent = request.is_notification and request.method in self.notifications
        logger.debug(
            "jsonrpc_request_received",
            method=request.method,
            request_id=request_id,
            is_notification=silent,
        )

        try:
            result = await self._execute_method(request)
        except ValidationError as e:
            logger.warning(
                "jsonrpc_invalid_params",
                method=request.method,
                error=str(e),
                request_id=request_id,
            )
            response = self._error_response(
                request_id,
                InvalidParamsError(
                    data={"validation_errors": json.loads(e.json(include_url=False))}
                ),
            )
        except ProtocolError as e:
            logger.warning(
                "jsonrpc_protocol_error",
                method=request.method,
                error=str(e),
                request_id=request_id,
            )
            response = self._error_response(request_id, e)
        except Exception as e:
            logger.error(
                "jsonrpc_method_failed",
                method=request.method,
                error=str(e),
                request_id=request_id,
                exc_info=True,
            )
            response = self._error_response(request_id, InternalError(data={"details": str(e)}))
        else:
            if isinstance(result, BaseModel):
                result = result.model_dump(mode="json", by_alias=True, exclude_none=True)
            response = create_success_response(request_id, result)

        if silent:
            return None
        return response

    async def _execute_method(self, request: JsonRpcRequest) -> Any:
        """Execute the handler registered for request.method.

        Raises:
            MethodNotFoundError: If no handler is registered under the name
        """
        handler = self.methods.get(request.method)
        if handler is None:
            raise MethodNotFoundError(request.method)

        result = handler(request.params)
        if inspect.isawaitable(result):
            result = await result
        return result

    @staticmethod
    def _error_response(request_id: int | str | None, error: ProtocolError) -> JsonRpcResponse:
        return create_error_response(request_id, error.code, message=error.message, data=error.data)
