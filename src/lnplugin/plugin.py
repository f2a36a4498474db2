"""Plugin controller.

Owns the option, method, hook and subscription registries and the transport,
keeps the transport's view of live names in step with the registries, and
runs the startup sequence:

1. resolve log output (file redirection under the host, stderr otherwise)
2. register the built-in ``getmanifest`` and ``init`` methods
3. serve requests until the host closes stdin
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import ExitStack, contextmanager, redirect_stdout
from pathlib import Path
from typing import Any, TextIO

import structlog

from lnplugin.config import LogSink, PluginSettings
from lnplugin.exceptions import (
    DuplicateNameError,
    EmptyArgumentError,
    NotFoundError,
    NotInitializedError,
    PluginError,
    StartupIOError,
)
from lnplugin.handshake import (
    HostConfig,
    InitCommand,
    Initialized,
    PluginState,
    Uninitialized,
)
from lnplugin.logging import configure_logging
from lnplugin.manifest import GetManifestCommand, is_builtin_method
from lnplugin.methods import RpcCommand, RpcMethod
from lnplugin.options import Option, OptionRegistry
from lnplugin.transport.stdio import StdioJsonRpcServer

logger = structlog.get_logger()

InitCallback = Callable[["Plugin", dict[str, str], HostConfig], Any]


def _is_process_stdout(stream: Any) -> bool:
    """Check whether stream writes to the process's standard output."""
    if stream is sys.stdout or stream is sys.__stdout__:
        return True
    try:
        return sys.__stdout__ is not None and stream.fileno() == sys.__stdout__.fileno()
    except (AttributeError, OSError, ValueError):
        return False


class Plugin:
    """A plugin process driven by a host over JSON-RPC.

    Args:
        init_fn: Called after the ``init`` handshake with the plugin, the
            option values and the host configuration
        settings: Process settings (default: read from the environment)
        log_sink: Explicit log sink; when omitted it is resolved from
            settings, and a file sink only applies when serving on stdout
        server: Transport (default: a new StdioJsonRpcServer)

    Example:
        >>> plugin = Plugin(on_init)
        >>> plugin.register_option(Option(name="greeting", default="hello"))
        >>> plugin.register_method(RpcMethod(Hello, "Say hello"))
        >>> plugin.start(sys.stdin, sys.stdout)
    """

    def __init__(
        self,
        init_fn: InitCallback | None = None,
        *,
        settings: PluginSettings | None = None,
        log_sink: LogSink | None = None,
        server: StdioJsonRpcServer | None = None,
    ) -> None:
        self.settings = settings or PluginSettings()
        self.init_fn = init_fn

        self._server = server or StdioJsonRpcServer()
        self._options = OptionRegistry()
        self._methods: dict[str, RpcMethod] = {}
        self._hooks: dict[str, RpcMethod] = {}
        self._subscriptions: dict[str, RpcMethod] = {}

        self._state: PluginState = Uninitialized()
        self._state_lock = threading.Lock()
        self._started = False

        self._explicit_sink = log_sink is not None
        self._log_sink = log_sink or self.settings.resolve_log_sink()

        # An embedding application's structlog setup is left alone.
        if not structlog.is_configured():
            configure_logging(sys.stderr, self.settings.log_level)

    # State

    @property
    def state(self) -> PluginState:
        return self._state

    @property
    def initialized(self) -> bool:
        return self._state.initialized

    @property
    def config(self) -> HostConfig:
        """Host configuration from the ``init`` handshake.

        Raises:
            NotInitializedError: If the host has not called ``init`` yet
        """
        state = self._state
        if isinstance(state, Initialized):
            return state.config
        raise NotInitializedError("Plugin has not been initialized by the host yet")

    @property
    def started(self) -> bool:
        return self._started

    @property
    def log_sink(self) -> LogSink:
        return self._log_sink

    def _initialize(self, config: HostConfig) -> None:
        """Move to ``Initialized(config)``, replacing any earlier config."""
        with self._state_lock:
            if self._state.initialized:
                logger.warning("plugin_reinitialized", lightning_dir=config.lightning_dir)
            self._state = Initialized(config=config)
        logger.info(
            "plugin_initialized",
            lightning_dir=config.lightning_dir,
            rpc_file=config.rpc_file,
        )

    # Registries

    @property
    def options(self) -> list[Option]:
        return self._options.get_all()

    @property
    def methods(self) -> list[RpcMethod]:
        return list(self._methods.values())

    @property
    def hooks(self) -> list[RpcMethod]:
        return list(self._hooks.values())

    @property
    def subscriptions(self) -> list[RpcMethod]:
        return list(self._subscriptions.values())

    def get_option(self, name: str) -> Option | None:
        return self._options.get(name)

    def get_method(self, name: str) -> RpcMethod | None:
        return self._methods.get(name)

    def option_values(self) -> dict[str, str]:
        """Snapshot of every option's current value."""
        return self._options.snapshot_values()

    def register_option(self, option: Option | None) -> None:
        """Register an option.

        Raises:
            EmptyArgumentError: If option is None
            DuplicateNameError: If the name is already registered
        """
        self._options.register(option)

    def unregister_option(self, option: Option | str | None) -> None:
        """Unregister an option, given the option or its name.

        Raises:
            EmptyArgumentError: If option is None
            NotFoundError: If no such option is registered
        """
        if option is None:
            raise EmptyArgumentError("option")
        name = option if isinstance(option, str) else option.name
        self._options.unregister(name)

    def register_method(self, method: RpcMethod | None) -> None:
        """Register an RPC method with the transport and the method registry.

        Raises:
            EmptyArgumentError: If method is None
            DuplicateNameError: If the name is taken or reserved
        """
        self._reject_reserved(method, "method")
        self._register(self._methods, "method", method)

    def unregister_method(self, method: RpcMethod | None) -> None:
        """Unregister an RPC method from both the registry and the transport.

        Raises:
            EmptyArgumentError: If method is None
            NotFoundError: If the method is not registered
        """
        self._unregister(self._methods, "method", method)

    def register_hook(self, hook: RpcMethod | None) -> None:
        """Register a handler for a host hook (for example ``htlc_accepted``)."""
        self._reject_reserved(hook, "hook")
        self._register(self._hooks, "hook", hook)

    def unregister_hook(self, hook: RpcMethod | None) -> None:
        self._unregister(self._hooks, "hook", hook)

    def subscribe(self, subscription: RpcMethod | None) -> None:
        """Register a handler for a host notification topic."""
        self._reject_reserved(subscription, "subscription")
        self._register(self._subscriptions, "subscription", subscription)

    def unsubscribe(self, subscription: RpcMethod | None) -> None:
        self._unregister(self._subscriptions, "subscription", subscription)

    def method(
        self, description: str = "", params: Sequence[str] | None = None
    ) -> Callable[[type[RpcCommand]], type[RpcCommand]]:
        """Class decorator registering an RpcCommand as an RPC method.

        Usage:
            @plugin.method("Reply with pong")
            class Ping(RpcCommand):
                def call(self) -> str:
                    return "pong"
        """

        def decorator(command: type[RpcCommand]) -> type[RpcCommand]:
            self.register_method(RpcMethod(command, description, params))
            return command

        return decorator

    def hook(self) -> Callable[[type[RpcCommand]], type[RpcCommand]]:
        """Class decorator registering an RpcCommand as a hook handler."""

        def decorator(command: type[RpcCommand]) -> type[RpcCommand]:
            self.register_hook(RpcMethod(command))
            return command

        return decorator

    def subscription(self) -> Callable[[type[RpcCommand]], type[RpcCommand]]:
        """Class decorator registering an RpcCommand as a notification handler."""

        def decorator(command: type[RpcCommand]) -> type[RpcCommand]:
            self.subscribe(RpcMethod(command))
            return command

        return decorator

    def _reject_reserved(self, method: RpcMethod | None, kind: str) -> None:
        if method is not None and is_builtin_method(method.name):
            raise DuplicateNameError(kind, method.name)

    def _owned_elsewhere(self, registry: dict[str, RpcMethod], name: str) -> bool:
        return any(
            name in other
            for other in (self._methods, self._hooks, self._subscriptions)
            if other is not registry
        )

    def _register(
        self, registry: dict[str, RpcMethod], kind: str, method: RpcMethod | None
    ) -> None:
        if method is None:
            raise EmptyArgumentError(kind)

        name = method.name
        try:
            self._server.register(
                name, method.bind(self), notification=registry is self._subscriptions
            )
        except DuplicateNameError as e:
            raise DuplicateNameError(kind, name) from e
        try:
            if name in registry:
                raise DuplicateNameError(kind, name)
            registry[name] = method
        except PluginError:
            self._server.unregister(name)
            raise

        logger.debug("command_registered", kind=kind, name=name)

    def _unregister(
        self, registry: dict[str, RpcMethod], kind: str, method: RpcMethod | None
    ) -> None:
        if method is None:
            raise EmptyArgumentError(kind)

        name = method.name
        if name not in registry and self._owned_elsewhere(registry, name):
            raise NotFoundError(kind, name)

        in_registry = registry.pop(name, None) is not None
        try:
            self._server.unregister(name)
            in_transport = True
        except NotFoundError:
            in_transport = False

        if not (in_registry or in_transport):
            raise NotFoundError(kind, name)
        if in_registry != in_transport:
            logger.warning(
                "registry_out_of_sync",
                kind=kind,
                name=name,
                in_registry=in_registry,
                in_transport=in_transport,
            )
        logger.debug("command_unregistered", kind=kind, name=name)

    # Lifecycle

    def set_log_file(self, path: str | Path) -> None:
        """Change the log file used for redirection. Call before ``start``."""
        if self._started:
            raise PluginError("Cannot change the log file after start")
        self.settings = self.settings.model_copy(update={"log_file": Path(path)})
        if self._log_sink.is_file:
            self._log_sink = LogSink.file(path)

    def start(self, instream: TextIO | None = None, outstream: TextIO | None = None) -> None:
        """Register the built-ins and serve the host until it closes stdin.

        Blocks for the lifetime of the plugin process.

        Args:
            instream: Request stream (default: ``sys.stdin``)
            outstream: Response stream (default: ``sys.stdout``)

        Raises:
            StartupIOError: If the redirected log file cannot be opened
            PluginError: If the plugin was already started
        """
        if self._started:
            raise PluginError("Plugin already started")

        instream = instream if instream is not None else sys.stdin
        outstream = outstream if outstream is not None else sys.stdout

        with self._log_redirection(outstream):
            self._started = True
            self._register_builtins()
            logger.info(
                "plugin_started",
                methods=len(self._methods),
                options=len(self._options),
                hooks=len(self._hooks),
                subscriptions=len(self._subscriptions),
            )
            self._server.run(instream, outstream)

        logger.info("plugin_stopped")

    def _register_builtins(self) -> None:
        self._register(
            self._methods, "method", RpcMethod(GetManifestCommand, "Generate manifest for plugin")
        )
        self._register(self._methods, "method", RpcMethod(InitCommand, "Initialize plugin"))

    @contextmanager
    def _log_redirection(self, outstream: Any) -> Iterator[TextIO | None]:
        """Send log output (and stray stdout writes) to the log file if needed.

        A resolved file sink only applies when responses go to the process's
        stdout; an explicit one always applies.
        """
        level = self.settings.log_level
        serving_stdout = _is_process_stdout(outstream)
        sink = self._log_sink

        if not sink.is_file or not (self._explicit_sink or serving_stdout):
            if not structlog.is_configured():
                configure_logging(sys.stderr, level)
            yield None
            return

        try:
            log_file = open(sink.path, "a", buffering=1, encoding="utf-8")
        except OSError as e:
            raise StartupIOError(sink.path, e) from e

        with ExitStack() as stack:
            stack.enter_context(log_file)
            stack.callback(structlog.configure, **structlog.get_config())
            configure_logging(log_file, level)
            if serving_stdout:
                stack.enter_context(redirect_stdout(log_file))
            logger.info("log_redirected", path=str(sink.path))
            yield log_file
