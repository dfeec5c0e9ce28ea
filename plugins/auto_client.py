#!/usr/bin/env python3
"""Host-runtime client that runs an externally packaged trading plugin."""
from __future__ import annotations

import asyncio
import importlib
import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Union

PLUGIN_FACTORY_SETTING = "AUTO_CLIENT_PLUGIN"

SettingsGetter = Callable[[str], Optional[str]]


class AgentRuntime(Protocol):
    clients: Dict[str, Any]

    def get_setting(self, key: str) -> Optional[str]: ...


class TradingPlugin(Protocol):
    """Lifecycle hooks the wrapped plugin must provide.

    ``on_start`` and ``cleanup`` are optional and looked up at call time.
    """

    async def initialize(self, runtime: AgentRuntime) -> Any: ...

    async def start(self) -> Any: ...


PluginFactory = Callable[[SettingsGetter, AgentRuntime], Union[TradingPlugin, Awaitable[TradingPlugin]]]


class PluginFactoryError(RuntimeError):
    """Raised when the plugin factory cannot be resolved from runtime settings."""


class LifecycleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    STARTED = "started"
    STOPPED = "stopped"


def load_plugin_factory(path: Optional[str]) -> PluginFactory:
    """Imports a ``package.module:callable`` factory path."""
    if not path:
        raise PluginFactoryError(f"{PLUGIN_FACTORY_SETTING} is not configured")
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise PluginFactoryError(f"Invalid plugin factory path {path!r}; expected 'module:callable'")
    try:
        module = importlib.import_module(module_name)
        factory = getattr(module, attr)
    except (ImportError, AttributeError) as exc:
        raise PluginFactoryError(f"Could not load plugin factory {path!r}: {exc}") from exc
    if not callable(factory):
        raise PluginFactoryError(f"Plugin factory {path!r} is not callable")
    return factory


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class AutoClient:
    CLIENT_NAME = "auto"

    def __init__(
        self,
        runtime: AgentRuntime,
        plugin_factory: PluginFactory,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.runtime = runtime
        self.plugin_factory = plugin_factory
        self.plugin: Optional[TradingPlugin] = None
        self.state = LifecycleState.UNINITIALIZED
        # Slot for a recurring task; nothing schedules one yet.
        self.interval_task: Optional[asyncio.Task] = None
        self.logger = logger or logging.getLogger(__name__)
        self.logger.info("AutoClient created")

    async def initialize(self) -> None:
        """Creates the plugin and runs initialize, start and on_start in order."""
        self.state = LifecycleState.INITIALIZING
        self.logger.info("AutoClient initialization started")
        try:
            self.plugin = await _maybe_await(self.plugin_factory(self.runtime.get_setting, self.runtime))

            self.logger.info("Plugin created, initializing...")
            await _maybe_await(self.plugin.initialize(self.runtime))

            self.logger.info("Plugin initialized, starting...")
            await _maybe_await(self.plugin.start())

            on_start = getattr(self.plugin, "on_start", None)
            if on_start is not None:
                self.logger.info("Triggering plugin on_start...")
                await _maybe_await(on_start())
        except Exception as exc:
            self.logger.error(
                "AutoClient initialization failed: %s (phase=initialization, plugin_state=%s)",
                exc,
                "created" if self.plugin is not None else "null",
            )
            raise

        self.state = LifecycleState.STARTED
        self.logger.info("Trading plugin fully initialized and started in AutoClient")

    async def stop(self) -> None:
        self.logger.info("Stopping AutoClient...")
        if self.interval_task is not None:
            self.interval_task.cancel()
            self.interval_task = None

        cleanup = getattr(self.plugin, "cleanup", None) if self.plugin is not None else None
        if cleanup is not None:
            try:
                await _maybe_await(cleanup())
            except Exception as exc:
                self.logger.error("Error stopping AutoClient: %s", exc)
                # A half-started plugin must not block the host from tearing down.
                if self.state == LifecycleState.STARTED:
                    raise
        self.state = LifecycleState.STOPPED
        self.logger.info("AutoClient stopped successfully")


class AutoClientInterface:
    """The start/stop pair a host runtime calls to manage the ``auto`` client."""

    def __init__(
        self,
        plugin_factory: Optional[PluginFactory] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.plugin_factory = plugin_factory
        self.logger = logger or logging.getLogger(__name__)

    async def start(self, runtime: AgentRuntime) -> AutoClient:
        self.logger.info("Starting AutoClient interface...")
        factory = self.plugin_factory or load_plugin_factory(runtime.get_setting(PLUGIN_FACTORY_SETTING))
        client = AutoClient(runtime, factory, logger=self.logger)
        await client.initialize()
        return client

    async def stop(self, runtime: AgentRuntime) -> None:
        self.logger.info("Stopping AutoClient interface...")
        clients = getattr(runtime, "clients", None) or {}
        client = clients.get(AutoClient.CLIENT_NAME)
        if client is not None:
            await client.stop()


auto_client_interface = AutoClientInterface()
