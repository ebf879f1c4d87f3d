"""Statement splitting for fixture SQL scripts.

Scripts are written in a MySQL-flavoured dialect: ``#`` and ``--`` line
comments, ``/* */`` block comments and the ``auto_increment`` column keyword,
which SQLite rejects. The scanner below splits on ``;`` only outside quoted
text and comments, drops the comments, and strips ``auto_increment`` from
unquoted text. Backslash is not an escape character inside literals (SQLite
semantics); a quote is escaped by doubling it.
"""
from __future__ import annotations

import re
from typing import Iterable, Iterator

STATEMENT_SEPARATOR = ";"

_AUTO_INCREMENT = re.compile(r"\bauto_increment\b", re.IGNORECASE)
_QUOTES = frozenset({"'", '"', "`"})


class _Scanner:
    def __init__(self, sql: str, *, split: bool = True) -> None:
        self._sql = sql
        self._split = split
        self._pos = 0
        self._parts: list[str] = []
        self._normal: list[str] = []

    def statements(self) -> Iterator[str]:
        sql = self._sql
        end = len(sql)
        while self._pos < end:
            ch = sql[self._pos]
            nxt = sql[self._pos + 1 : self._pos + 2]
            if ch == STATEMENT_SEPARATOR and self._split:
                statement = self._finish()
                if statement:
                    yield statement
                self._pos += 1
            elif ch == "#" or (ch == "-" and nxt == "-"):
                self._skip_line_comment()
            elif ch == "/" and nxt == "*":
                self._skip_block_comment()
            elif ch in _QUOTES:
                self._read_quoted(ch)
            else:
                self._normal.append(ch)
                self._pos += 1
        statement = self._finish()
        if statement:
            yield statement

    def _skip_line_comment(self) -> None:
        newline = self._sql.find("\n", self._pos)
        # the newline itself stays, it may separate tokens
        self._pos = len(self._sql) if newline == -1 else newline

    def _skip_block_comment(self) -> None:
        close = self._sql.find("*/", self._pos + 2)
        self._pos = len(self._sql) if close == -1 else close + 2
        self._normal.append(" ")

    def _read_quoted(self, quote: str) -> None:
        self._flush_normal()
        sql = self._sql
        start = self._pos
        self._pos += 1
        while True:
            close = sql.find(quote, self._pos)
            if close == -1:
                # unterminated literal; hand it to the engine as is
                self._pos = len(sql)
                break
            if sql[close + 1 : close + 2] == quote:
                self._pos = close + 2
                continue
            self._pos = close + 1
            break
        self._parts.append(sql[start : self._pos])

    def _flush_normal(self) -> None:
        if not self._normal:
            return
        text = "".join(self._normal)
        self._normal.clear()
        self._parts.append(_AUTO_INCREMENT.sub("", text))

    def _finish(self) -> str:
        self._flush_normal()
        statement = "".join(self._parts).strip()
        self._parts.clear()
        return statement


def split_statements(sql: str) -> list[str]:
    """Split ``sql`` into cleaned, non-blank statements (without the trailing ``;``)."""
    return list(_Scanner(sql).statements())


def clean_statement(statement: str) -> str:
    """Clean a single pre-split statement; returns ``""`` when nothing executable is left."""
    return "".join(_Scanner(statement, split=False).statements())


def clean_statements(statements: Iterable[str]) -> list[str]:
    cleaned = (clean_statement(statement) for statement in statements)
    return [statement for statement in cleaned if statement]


def join_scripts(*scripts: str) -> str:
    return STATEMENT_SEPARATOR.join(scripts)


__all__ = [
    "STATEMENT_SEPARATOR",
    "split_statements",
    "clean_statement",
    "clean_statements",
    "join_scripts",
]
