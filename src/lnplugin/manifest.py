"""Capability manifest returned by the ``getmanifest`` discovery call."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from lnplugin.methods import RpcCommand

if TYPE_CHECKING:
    from lnplugin.plugin import Plugin

GETMANIFEST = "getmanifest"
INIT = "init"
BUILTIN_METHODS = frozenset({GETMANIFEST, INIT})


def is_builtin_method(name: str) -> bool:
    """Built-in handshake methods are never listed in the manifest."""
    return name in BUILTIN_METHODS


class Manifest(BaseModel):
    """Snapshot of what the plugin offers the host.

    Built on demand for each discovery call; never stored.
    """

    options: list[dict[str, Any]] = Field(default_factory=list, description="Plugin options")
    rpcmethods: list[dict[str, Any]] = Field(
        default_factory=list, description="RPC methods, built-ins excluded"
    )
    hooks: list[str] = Field(default_factory=list, description="Subscribed host hooks")
    subscriptions: list[str] = Field(
        default_factory=list, description="Subscribed notification topics"
    )


def build_manifest(plugin: Plugin) -> Manifest:
    """Assemble the manifest from the plugin's registries, in registry order."""
    return Manifest(
        options=[option.to_manifest() for option in plugin.options],
        rpcmethods=[
            method.to_manifest()
            for method in plugin.methods
            if not is_builtin_method(method.name)
        ],
        hooks=[hook.name for hook in plugin.hooks],
        subscriptions=[subscription.name for subscription in plugin.subscriptions],
    )


class GetManifestCommand(RpcCommand):
    """Built-in discovery method."""

    rpc_name = GETMANIFEST

    def call(self) -> Manifest:
        return build_manifest(self.plugin)
