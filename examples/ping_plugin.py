"""Minimal lnplugin plugin.

Run it under the host, or by hand:

    lnplugin run examples.ping_plugin:plugin
    lnplugin manifest examples.ping_plugin:plugin
"""

from __future__ import annotations

from typing import Any

import structlog

from lnplugin import HostConfig, Option, Plugin, RpcCommand

logger = structlog.get_logger()


def on_init(plugin: Plugin, options: dict[str, str], config: HostConfig) -> None:
    logger.info("ping_plugin_initialized", rpc_file=config.rpc_file, reply=options["reply"])


plugin = Plugin(on_init)
plugin.register_option(Option(name="reply", default="pong", description="Reply sent by ping"))


@plugin.method("replies pong")
class Ping(RpcCommand):
    rpc_name = "ping"

    def call(self) -> str:
        return self.plugin.get_option("reply").value


@plugin.method("Echo a message back, repeated", params=["message", "times"])
class Echo(RpcCommand):
    rpc_name = "echo"

    message: str = ""
    times: int = 1

    def call(self) -> dict[str, Any]:
        return {"message": " ".join([self.message] * self.times)}


@plugin.hook()
class HtlcAccepted(RpcCommand):
    """Let every incoming HTLC through untouched."""

    rpc_name = "htlc_accepted"

    onion: dict[str, Any] = {}
    htlc: dict[str, Any] = {}

    def call(self) -> dict[str, str]:
        logger.info("htlc_accepted", amount=self.htlc.get("amount_msat"))
        return {"result": "continue"}


@plugin.subscription()
class Connect(RpcCommand):
    rpc_name = "connect"

    id: str = ""
    address: dict[str, Any] = {}

    def call(self) -> None:
        logger.info("peer_connected", peer_id=self.id)


if __name__ == "__main__":
    plugin.start()
