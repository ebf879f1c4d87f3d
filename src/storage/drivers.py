from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Sequence

from src.core.errors import DriverUnavailableError, InvalidDescriptorError

PRIMARY_DRIVER = "sqlite3"
FALLBACK_DRIVER = "pysqlite3"
DEFAULT_DRIVERS: tuple[str, ...] = (PRIMARY_DRIVER, FALLBACK_DRIVER)

_DESCRIPTOR_MARKER = ":dbname="

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Driver:
    """A DB-API 2.0 module able to open SQLite database files."""

    name: str
    module: ModuleType

    def connect(self, path: str | Path) -> Any:
        return self.module.connect(str(path))

    @property
    def error_class(self) -> type[BaseException]:
        return getattr(self.module, "Error", Exception)


@dataclass(frozen=True)
class ConnectionDescriptor:
    driver: str
    path: Path

    def __str__(self) -> str:
        return format_descriptor(self.driver, self.path)


def select_driver(candidates: Sequence[str] | None = None) -> Driver:
    """Return the first importable driver, warning whenever a preferred one is skipped."""
    names = tuple(candidates) if candidates else DEFAULT_DRIVERS
    failures: list[str] = []
    for name in names:
        try:
            module = importlib.import_module(name)
        except ImportError as exc:
            failures.append(f"{name}: {exc}")
            _logger.warning(
                "Database driver unavailable, trying next",
                extra={"operation": "select_driver", "driver": name, "error": str(exc)},
            )
            continue
        return Driver(name=name, module=module)

    raise DriverUnavailableError(
        "No usable SQLite driver is installed (" + "; ".join(failures) + ")",
        title="Database Driver Missing",
        remediation="Use a Python build with sqlite3 support or install pysqlite3-binary.",
    )


def format_descriptor(driver: str, path: str | Path) -> str:
    return f"{driver}{_DESCRIPTOR_MARKER}{path}"


def parse_connection_descriptor(dsn: str) -> ConnectionDescriptor:
    driver, marker, path = str(dsn).partition(_DESCRIPTOR_MARKER)
    if not marker or not driver or not path:
        raise InvalidDescriptorError(
            f"Not a connection descriptor: {dsn!r}",
            title="Invalid Connection Descriptor",
            remediation="Expected '<driver>:dbname=<path>'.",
        )
    return ConnectionDescriptor(driver=driver, path=Path(path))


def open_connection(dsn: str) -> Any:
    """Open a new connection for a descriptor produced by the database builder."""
    descriptor = parse_connection_descriptor(dsn)
    driver = select_driver([descriptor.driver])
    return driver.connect(descriptor.path)


__all__ = [
    "Driver",
    "ConnectionDescriptor",
    "DEFAULT_DRIVERS",
    "PRIMARY_DRIVER",
    "FALLBACK_DRIVER",
    "select_driver",
    "format_descriptor",
    "parse_connection_descriptor",
    "open_connection",
]
