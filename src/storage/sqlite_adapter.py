from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Sequence

from src.core.errors import StatementExecutionError
from src.storage.drivers import Driver, format_descriptor

Params = Sequence[Any]


class SQLiteAdapter:
    """Single connection to a fixture database file, opened through a selected driver."""

    def __init__(self, db_path: Path, driver: Driver) -> None:
        self._db_path = Path(db_path)
        self._driver = driver
        self._connection: Any | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def dsn(self) -> str:
        return format_descriptor(self._driver.name, self._db_path)

    def connect(self) -> None:
        if self._connection is not None:
            return
        self._connection = self._driver.connect(self._db_path)

    def close(self) -> None:
        if self._connection is None:
            return
        self._connection.close()
        self._connection = None

    def commit(self) -> None:
        if self._connection is None:
            return
        self._connection.commit()

    def execute(self, sql: str, params: Params = ()) -> Any:
        self._ensure_connection()
        assert self._connection is not None
        try:
            return self._connection.execute(sql, tuple(params))
        except self._driver.error_class as exc:
            raise StatementExecutionError(str(exc), statement=sql) from exc

    def execute_statements(self, statements: Iterable[str]) -> int:
        """Run statements in order; stops at the first failure."""
        count = 0
        for statement in statements:
            self.execute(statement)
            count += 1
        self._logger.debug(
            "Executed statements",
            extra={"operation": "execute_statements", "count": count, "dsn": self.dsn},
        )
        return count

    def __enter__(self) -> "SQLiteAdapter":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ensure_connection(self) -> None:
        if self._connection is None:
            self.connect()


__all__ = ["SQLiteAdapter"]
