from __future__ import annotations

import importlib.util
import json
import logging
import os
import sys
import weakref
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable, Mapping, Optional

from jinja2 import Environment, StrictUndefined

from src.core.errors import ConfigurationTypeError
from src.framework.application import forget_application
from src.framework.config import ApplicationConfig
from src.lib.paths import APP_FILE_PREFIX, APP_FILE_SUFFIX, allocate_temp_file
from src.lib.settings import resolve_keep

ConfigInput = Mapping[str, Any] | ApplicationConfig | None

APPLICATION_TEMPLATE = '''\
import json
from src.framework.application import setup_application
from src.framework.config import ApplicationConfig
CONFIG = ApplicationConfig.from_dict(json.loads({{ config_literal }}))
APPLICATION = setup_application({{ module_literal }}, plugins={{ plugins_literal }}, config=CONFIG)
'''

_environment = Environment(undefined=StrictUndefined, keep_trailing_newline=True, autoescape=False)
_template = _environment.from_string(APPLICATION_TEMPLATE)

_logger = logging.getLogger(__name__)

# Handles behind application(); pinned so only cleanup() or interpreter exit removes them.
_pinned: list["GeneratedApplication"] = []


def _discard(path: Path, module_name: str) -> None:
    path.unlink(missing_ok=True)
    sys.modules.pop(module_name, None)
    forget_application(module_name)


class GeneratedApplication:
    """A generated driver module on disk.

    The directory holding the file is not added to ``sys.path``; use
    ``load()`` to import it by path.
    """

    def __init__(
        self,
        module_name: str,
        path: Path,
        *,
        plugins: list[str],
        config: ApplicationConfig,
        keep: bool = False,
    ) -> None:
        self.module_name = module_name
        self.path = Path(path)
        self.plugins = plugins
        self.config = config
        self.keep = keep
        self._finalizer = (
            None if keep else weakref.finalize(self, _discard, self.path, module_name)
        )

    def load(self) -> ModuleType:
        loaded = sys.modules.get(self.module_name)
        if loaded is not None:
            return loaded
        spec = importlib.util.spec_from_file_location(self.module_name, self.path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load generated application from {self.path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[self.module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            sys.modules.pop(self.module_name, None)
            raise
        return module

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8")

    def cleanup(self) -> None:
        if self._finalizer is not None:
            self._finalizer()

    def __enter__(self) -> "GeneratedApplication":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def __repr__(self) -> str:
        return f"GeneratedApplication(module_name={self.module_name!r}, path={str(self.path)!r})"


class ApplicationName(str):
    """Module name string that keeps its generated file alive."""

    handle: GeneratedApplication

    def __new__(cls, handle: GeneratedApplication) -> "ApplicationName":
        name = super().__new__(cls, handle.module_name)
        name.handle = handle
        return name


def coerce_config(config: ConfigInput) -> ApplicationConfig:
    if config is None:
        return ApplicationConfig()
    if isinstance(config, ApplicationConfig):
        return config
    if isinstance(config, Mapping):
        return ApplicationConfig.from_mapping(config)
    raise ConfigurationTypeError(
        f"Unsupported configuration type: {type(config).__name__}",
        title="Invalid Configuration",
        remediation="Pass a mapping or an ApplicationConfig instance.",
    )


def render_application(module_name: str, plugins: Iterable[str], config: ApplicationConfig) -> str:
    try:
        payload = json.dumps(config.to_dict(), indent=2, sort_keys=True)
    except TypeError as exc:
        raise ConfigurationTypeError(
            f"Configuration is not JSON serializable: {exc}",
            title="Invalid Configuration",
            remediation="Use plain strings, numbers, lists and mappings as option values.",
        ) from exc
    return _template.render(
        module_literal=repr(module_name),
        plugins_literal=repr(list(plugins)),
        config_literal=repr(payload),
    )


def generate_application(
    plugins: Optional[Iterable[str]] = None,
    config: ConfigInput = None,
    *,
    keep: Optional[bool] = None,
    directory: Optional[str | os.PathLike[str]] = None,
) -> GeneratedApplication:
    """Write a uniquely named driver module (default: current directory)."""
    plugin_list = list(plugins or [])
    app_config = coerce_config(config)
    keep_file = resolve_keep(keep)

    path = allocate_temp_file(APP_FILE_PREFIX, APP_FILE_SUFFIX, directory or os.getcwd())
    module_name = path.stem
    try:
        source = render_application(module_name, plugin_list, app_config)
    except ConfigurationTypeError:
        _discard(path, module_name)
        raise
    handle = GeneratedApplication(
        module_name, path, plugins=plugin_list, config=app_config, keep=keep_file
    )
    with path.open("w", encoding="utf-8") as stream:
        stream.write(source)

    _logger.info(
        "Generated application driver",
        extra={
            "operation": "generate_application",
            "module_name": module_name,
            "path": str(path),
            "plugins": ",".join(plugin_list),
            "keep": keep_file,
        },
    )
    return handle


def application(
    plugins: Optional[Iterable[str]] = None,
    config: ConfigInput = None,
    *,
    keep: Optional[bool] = None,
) -> ApplicationName:
    """Generate a driver in the current directory and return its module name.

    As with ``database()``, the file outlives the returned name and is removed
    at interpreter exit or on ``name.handle.cleanup()``.
    """
    handle = generate_application(plugins, config, keep=keep)
    _pinned.append(handle)
    return ApplicationName(handle)


__all__ = [
    "APPLICATION_TEMPLATE",
    "GeneratedApplication",
    "ApplicationName",
    "coerce_config",
    "render_application",
    "generate_application",
    "application",
]
