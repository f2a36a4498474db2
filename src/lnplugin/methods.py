"""RPC commands and method descriptors.

A command is a pydantic model: its public fields are the method's parameters
and ``call()`` runs it. The transport builds a fresh command per request from
the request params, binds the owning plugin, and invokes it.

An ``RpcMethod`` describes a command for the manifest: its name, a
description and the parameter names. Parameter names are either declared
explicitly at registration or read from the command's fields.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, PrivateAttr

from lnplugin.exceptions import EmptyArgumentError
from lnplugin.protocol.exceptions import InvalidParamsError

if TYPE_CHECKING:
    from lnplugin.plugin import Plugin

DEFAULT_METHOD_DESCRIPTION = "A lnplugin RPC method."

# Transport-facing handler: receives raw request params, returns the result
# (or an awaitable of it).
JsonRpcHandler = Callable[[Any], Any]


class RpcCommand(BaseModel):
    """Base class for everything the host can call on the plugin.

    Subclasses declare parameters as fields and implement ``call()``, which
    may be a regular or an ``async`` method. Unknown params sent by the host
    are ignored.

    Example:
        >>> class Echo(RpcCommand):
        ...     rpc_name = "echo"
        ...     message: str = ""
        ...
        ...     def call(self) -> dict[str, str]:
        ...         return {"message": self.message}
    """

    rpc_name: ClassVar[str] = ""

    _plugin: Any = PrivateAttr(default=None)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @classmethod
    def method_name(cls) -> str:
        """Return the RPC name: ``rpc_name`` or the lower-cased class name."""
        return cls.rpc_name or cls.__name__.lower()

    @classmethod
    def parameter_fields(cls) -> list[str]:
        """Externally visible parameter names in declaration order.

        Aliases replace field names; excluded fields are skipped.
        """
        return [
            field.alias or name
            for name, field in cls.model_fields.items()
            if not field.exclude
        ]

    @classmethod
    def from_params(
        cls,
        params: dict[str, Any] | list[Any] | None,
        positional: Sequence[str] | None = None,
    ) -> RpcCommand:
        """Build a command from JSON-RPC params.

        Array params are bound by position to ``positional`` (default:
        ``parameter_fields()``), the same names the manifest advertises.

        Raises:
            InvalidParamsError: If more positional params than names are sent
            pydantic.ValidationError: If params fail field validation
        """
        if params is None:
            params = {}
        if isinstance(params, list):
            names = list(positional) if positional is not None else cls.parameter_fields()
            if len(params) > len(names):
                raise InvalidParamsError(
                    f"{cls.method_name()} takes at most {len(names)} params, got {len(params)}"
                )
            params = dict(zip(names, params))
        return cls.model_validate(params)

    @property
    def plugin(self) -> Plugin:
        """The plugin that dispatched this command."""
        return self._plugin

    def call(self) -> Any:
        raise NotImplementedError(f"{type(self).__name__} must implement call()")


class RpcMethod:
    """Descriptor for a registered command.

    Args:
        command: RpcCommand subclass implementing the method
        description: Description shown in the manifest
        params: Explicit parameter names; when omitted they are read from
            the command's public fields in declaration order

    Raises:
        EmptyArgumentError: If command is None
        TypeError: If command is not an RpcCommand subclass
    """

    def __init__(
        self,
        command: type[RpcCommand] | None,
        description: str = "",
        params: Sequence[str] | None = None,
    ) -> None:
        if command is None:
            raise EmptyArgumentError("rpc method")
        if not (inspect.isclass(command) and issubclass(command, RpcCommand)):
            raise TypeError(f"{command!r} is not an RpcCommand subclass")
        self.command = command
        self.desc = description
        self._params = list(params) if params is not None else None

    @property
    def name(self) -> str:
        return self.command.method_name()

    @property
    def description(self) -> str:
        return self.desc or DEFAULT_METHOD_DESCRIPTION

    def parameter_names(self) -> list[str]:
        """Return the parameter names advertised in the manifest.

        Explicit params are returned verbatim; otherwise the command's
        visible fields. Array params are bound in this order.
        """
        if self._params is not None:
            return list(self._params)
        return self.command.parameter_fields()

    def positional_names(self) -> list[str]:
        """Names array params are bound to, in manifest order.

        Optional markers (``[name]``) in explicit params are stripped.
        """
        return [name.strip("[]") for name in self.parameter_names()]

    def to_manifest(self) -> dict[str, Any]:
        """Serialize to the manifest wire shape; ``params`` omitted when empty."""
        entry: dict[str, Any] = {"name": self.name, "description": self.description}
        params = self.parameter_names()
        if params:
            entry["params"] = params
        return entry

    def bind(self, plugin: Plugin | None) -> JsonRpcHandler:
        """Return the transport handler that runs this command for plugin."""
        command_cls = self.command
        positional = self.positional_names()

        async def handler(params: Any) -> Any:
            command = command_cls.from_params(params, positional)
            command._plugin = plugin
            result = command.call()
            if inspect.isawaitable(result):
                result = await result
            return result

        handler.__name__ = self.name
        handler.__qualname__ = f"{command_cls.__qualname__}.handler"
        return handler

    def __repr__(self) -> str:
        return f"<RpcMethod {self.name}>"
