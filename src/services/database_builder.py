from __future__ import annotations

import logging
import os
import weakref
from pathlib import Path
from typing import Iterable, Optional, Sequence

from src.core.errors import (
    DriverUnavailableError,
    ScriptNotFoundError,
    StatementExecutionError,
    missing_argument,
)
from src.lib.paths import DB_FILE_PREFIX, DB_FILE_SUFFIX, allocate_temp_file
from src.lib.settings import resolve_keep
from src.lib.sql_statements import clean_statements, join_scripts, split_statements
from src.storage.drivers import format_descriptor, parse_connection_descriptor, select_driver
from src.storage.sqlite_adapter import SQLiteAdapter

PathLike = str | os.PathLike[str]

_logger = logging.getLogger(__name__)

# Handles behind database(); pinned so only cleanup() or interpreter exit removes them.
_pinned: list["TemporaryDatabase"] = []


def _remove_file(path: Path) -> None:
    path.unlink(missing_ok=True)


class TemporaryDatabase:
    """A populated fixture database file owned by the caller.

    Unless ``keep`` is set, the file is removed on ``cleanup()``, when the
    handle is garbage collected, or at interpreter exit, whichever is first.
    """

    def __init__(self, path: Path, driver: str, *, keep: bool = False) -> None:
        self.path = Path(path)
        self.driver = driver
        self.keep = keep
        self.statements_executed = 0
        self._finalizer = None if keep else weakref.finalize(self, _remove_file, self.path)

    @property
    def dsn(self) -> str:
        return format_descriptor(self.driver, self.path)

    @property
    def closed(self) -> bool:
        return self._finalizer is not None and not self._finalizer.alive

    def cleanup(self) -> None:
        if self._finalizer is not None:
            self._finalizer()

    def __enter__(self) -> "TemporaryDatabase":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    def __repr__(self) -> str:
        return f"TemporaryDatabase(dsn={self.dsn!r}, keep={self.keep})"


class DatabaseDescriptor(str):
    """Connection descriptor string that keeps its database file alive."""

    handle: TemporaryDatabase

    def __new__(cls, handle: TemporaryDatabase) -> "DatabaseDescriptor":
        descriptor = super().__new__(cls, handle.dsn)
        descriptor.handle = handle
        return descriptor


def build_database(
    ddl: Optional[PathLike],
    data: Optional[PathLike],
    *,
    keep: Optional[bool] = None,
    directory: Optional[PathLike] = None,
    drivers: Optional[Sequence[str]] = None,
) -> TemporaryDatabase:
    """Create a temp SQLite file, run the DDL then the data script against it."""
    if not ddl:
        raise missing_argument("ddl", "a DDL file")
    if not data:
        raise missing_argument("data", "a data file")
    ddl_path = _existing_script(ddl, "DDL")
    data_path = _existing_script(data, "data")
    keep_file = resolve_keep(keep)

    path = allocate_temp_file(DB_FILE_PREFIX, DB_FILE_SUFFIX, directory)
    try:
        driver = select_driver(drivers)
    except DriverUnavailableError:
        if not keep_file:
            _remove_file(path)
        raise
    handle = TemporaryDatabase(path, driver.name, keep=keep_file)
    context = {"operation": "build_database", "dsn": handle.dsn, "ddl": str(ddl_path), "data": str(data_path)}

    script = join_scripts(_read_script(ddl_path), _read_script(data_path))
    try:
        with SQLiteAdapter(path, driver) as adapter:
            handle.statements_executed = adapter.execute_statements(split_statements(script))
            adapter.commit()
    except StatementExecutionError:
        _logger.error("Fixture database build failed", extra=context, exc_info=True)
        handle.cleanup()
        raise

    _logger.info(
        "Fixture database ready",
        extra={**context, "statements": handle.statements_executed, "keep": keep_file},
    )
    return handle


def database(
    ddl: Optional[PathLike],
    data: Optional[PathLike],
    *,
    keep: Optional[bool] = None,
) -> DatabaseDescriptor:
    """Build a fixture database and return just its connection descriptor.

    The file lives until interpreter exit even if only a plain copy of the
    descriptor survives; call ``descriptor.handle.cleanup()`` to drop it early.
    """
    handle = build_database(ddl, data, keep=keep)
    _pinned.append(handle)
    return DatabaseDescriptor(handle)


def apply_statements(dsn: str, statements: Iterable[str]) -> int:
    """Run an already split list of statements against an existing descriptor."""
    descriptor = parse_connection_descriptor(dsn)
    driver = select_driver([descriptor.driver])
    with SQLiteAdapter(descriptor.path, driver) as adapter:
        count = adapter.execute_statements(clean_statements(statements))
        adapter.commit()
    return count


def _existing_script(value: PathLike, label: str) -> Path:
    path = Path(value)
    if not path.is_file():
        raise ScriptNotFoundError(
            f"{label} file not found: {path}",
            title="SQL Script Missing",
            remediation="Check the script path relative to the current directory.",
        )
    return path


def _read_script(path: Path) -> str:
    return path.read_text(encoding="utf-8")


__all__ = [
    "TemporaryDatabase",
    "DatabaseDescriptor",
    "build_database",
    "database",
    "apply_statements",
]
