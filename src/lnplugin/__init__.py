"""lnplugin - plugin framework for JSON-RPC host processes.

A plugin registers options and RPC commands, then hands stdin/stdout to
``Plugin.start``. The host discovers the plugin's capabilities with
``getmanifest``, configures it with ``init``, and calls its methods.
"""

__version__ = "0.1.0"

from lnplugin.config import LogSink, PluginSettings
from lnplugin.exceptions import (
    DuplicateNameError,
    EmptyArgumentError,
    InvalidOptionValueError,
    NotFoundError,
    NotInitializedError,
    PluginError,
    StartupIOError,
)
from lnplugin.handshake import HostConfig, Initialized, Uninitialized
from lnplugin.manifest import Manifest, build_manifest
from lnplugin.methods import RpcCommand, RpcMethod
from lnplugin.options import Option, OptionRegistry
from lnplugin.plugin import Plugin

__all__ = [
    "__version__",
    # Plugin
    "Plugin",
    "RpcCommand",
    "RpcMethod",
    "Option",
    "OptionRegistry",
    "Manifest",
    "build_manifest",
    "HostConfig",
    "Initialized",
    "Uninitialized",
    # Settings
    "LogSink",
    "PluginSettings",
    # Exceptions
    "PluginError",
    "DuplicateNameError",
    "NotFoundError",
    "EmptyArgumentError",
    "StartupIOError",
    "NotInitializedError",
    "InvalidOptionValueError",
]
