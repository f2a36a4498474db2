"""Custom exceptions for lnplugin."""

from __future__ import annotations

from pathlib import Path


class PluginError(Exception):
    """Base exception for plugin framework errors."""

    pass


class DuplicateNameError(PluginError):
    """A method, hook, subscription or option with this name already exists."""

    def __init__(self, kind: str, name: str) -> None:
        """Initialize with the registry kind and the clashing name."""
        self.kind = kind
        self.name = name
        super().__init__(f"{kind.capitalize()} `{name}` already registered")


class NotFoundError(PluginError):
    """Nothing is registered under this name."""

    def __init__(self, kind: str, name: str) -> None:
        """Initialize with the registry kind and the unknown name."""
        self.kind = kind
        self.name = name
        super().__init__(f"No {kind} `{name}` registered")


class EmptyArgumentError(PluginError):
    """A null method or option reference was passed to the registry."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Empty {kind} reference")


class StartupIOError(PluginError):
    """The redirected log file could not be opened.

    Fatal: the plugin must not start, otherwise log text could end up on
    the protocol stream.
    """

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Unable to open log file {path}: {cause}")


class NotInitializedError(PluginError):
    """Host configuration was requested before the init handshake."""

    pass


class InvalidOptionValueError(PluginError, ValueError):
    """An option value could not be converted to the requested type."""

    def __init__(self, name: str, value: str, expected: str) -> None:
        self.name = name
        self.value = value
        self.expected = expected
        super().__init__(f"Option `{name}` value {value!r} is not a valid {expected}")
