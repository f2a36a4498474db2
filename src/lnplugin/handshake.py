"""The ``init`` handshake and the plugin state it drives.

The plugin starts ``Uninitialized``. The host's ``init`` call carries the
option values and the host configuration; applying it moves the plugin to
``Initialized(config)``, which never reverts.
"""

from __future__ import annotations

import json
from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field

from lnplugin.manifest import INIT
from lnplugin.methods import RpcCommand

logger = structlog.get_logger()

# The host discards the result of ``init``.
INIT_ACK = "ok"


class HostConfig(BaseModel):
    """Host configuration received in the ``init`` call.

    Attributes:
        lightning_dir: Host data directory (``lightning-dir``)
        rpc_file: Host RPC socket file name (``rpc-file``)
    """

    lightning_dir: str = Field(..., alias="lightning-dir", description="Host data directory")
    rpc_file: str = Field(..., alias="rpc-file", description="Host RPC socket file")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Uninitialized(BaseModel):
    """Plugin state before the host's ``init`` call."""

    initialized: Literal[False] = False

    model_config = ConfigDict(frozen=True)


class Initialized(BaseModel):
    """Plugin state once ``init`` has been applied."""

    config: HostConfig
    initialized: Literal[True] = True

    model_config = ConfigDict(frozen=True)


PluginState = Uninitialized | Initialized


def as_option_string(value: Any) -> str:
    """Convert a host-supplied option value to the string form options hold."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


class InitCommand(RpcCommand):
    """Built-in initialization method.

    Unknown option names are logged and skipped so that a newer host can
    talk to an older plugin. The user init callback runs last; whatever it
    returns or raises, the host gets the fixed acknowledgement.
    """

    rpc_name = INIT

    options: dict[str, Any] = Field(default_factory=dict, description="Option values")
    configuration: HostConfig = Field(..., description="Host configuration")

    def call(self) -> str:
        plugin = self.plugin

        for name, value in self.options.items():
            option = plugin.get_option(name)
            if option is None:
                logger.warning("unknown_option_ignored", option=name)
                continue
            option.set(as_option_string(value))

        plugin._initialize(self.configuration)

        if plugin.init_fn is not None:
            try:
                plugin.init_fn(plugin, plugin.option_values(), self.configuration)
            except Exception:
                logger.exception("init_callback_failed")

        return INIT_ACK
