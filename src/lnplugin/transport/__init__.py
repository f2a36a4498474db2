"""Transport layer for lnplugin.

Moves JSON-RPC messages over the plugin's stdin/stdout. It knows nothing
about the plugin handshake or the registered commands.
"""

from lnplugin.transport.stdio import MESSAGE_TERMINATOR, StdioJsonRpcServer

__all__ = [
    "MESSAGE_TERMINATOR",
    "StdioJsonRpcServer",
]
