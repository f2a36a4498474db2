"""Root-level pytest configuration for all tests."""

from __future__ import annotations

import io
import json
from collections.abc import Callable, Iterator
from typing import Any

import pytest
import structlog

from lnplugin.plugin import Plugin

HOST_CONFIGURATION = {"lightning-dir": "/tmp/x", "rpc-file": "/tmp/x/rpc"}


@pytest.fixture
def host_configuration() -> dict[str, str]:
    """Configuration block the host sends in `init`."""
    return dict(HOST_CONFIGURATION)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every test as if it was started outside the host."""
    for var in (
        "LIGHTNINGD_PLUGIN",
        "LNPLUGIN_LOG_FILE",
        "LNPLUGIN_LOG_LEVEL",
        "LNPLUGIN_HOST_MARKER",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Undo structlog configuration done by plugins under test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def plugin() -> Plugin:
    """Fresh plugin with no registrations."""
    return Plugin()


def encode_requests(messages: list[dict[str, Any]]) -> str:
    return "".join(json.dumps(message) + "\n" for message in messages)


def decode_responses(output: str) -> list[Any]:
    return [json.loads(chunk) for chunk in output.split("\n\n") if chunk.strip()]


@pytest.fixture
def run_session() -> Callable[[Plugin, list[dict[str, Any]]], list[Any]]:
    """Start a plugin on in-memory streams and return the decoded responses."""

    def _run(plugin: Plugin, messages: list[dict[str, Any]]) -> list[Any]:
        out = io.StringIO()
        plugin.start(io.StringIO(encode_requests(messages)), out)
        return decode_responses(out.getvalue())

    return _run
