from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from src.core.errors import PluginNameError
from src.framework.config import ApplicationConfig

_registry: dict[str, "Application"] = {}
_registry_lock = threading.RLock()


class Application:
    """A configured application driver, as declared by a generated module."""

    def __init__(
        self,
        name: str,
        *,
        plugins: Iterable[str] = (),
        config: Optional[ApplicationConfig] = None,
    ) -> None:
        self.name = name
        self.config = config or ApplicationConfig()
        self._requested = list(plugins)
        self.plugins: list[str] = []
        self.is_setup = False
        self._logger = logging.getLogger(__name__)

    def setup(self) -> "Application":
        if self.is_setup:
            return self
        for plugin in self._requested:
            if not isinstance(plugin, str) or not plugin.strip():
                raise PluginNameError(
                    f"Invalid plugin name: {plugin!r}",
                    title="Invalid Plugin",
                    remediation="Plugin names must be non-empty strings.",
                )
            if plugin not in self.plugins:
                self.plugins.append(plugin)
        self.is_setup = True
        self._logger.info(
            "Application set up",
            extra={"operation": "setup", "application": self.name, "plugins": ",".join(self.plugins)},
        )
        return self

    def __repr__(self) -> str:
        return f"Application(name={self.name!r}, plugins={self.plugins!r})"


def setup_application(
    name: str,
    *,
    plugins: Iterable[str] = (),
    config: Optional[ApplicationConfig] = None,
) -> Application:
    application = Application(name, plugins=plugins, config=config).setup()
    with _registry_lock:
        _registry[name] = application
    return application


def get_application(name: str) -> Optional[Application]:
    with _registry_lock:
        return _registry.get(name)


def forget_application(name: str) -> None:
    with _registry_lock:
        _registry.pop(name, None)


__all__ = ["Application", "setup_application", "get_application", "forget_application"]
