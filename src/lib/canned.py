"""Canned beer-database fixtures shipped with the devkit.

Two variants exist: ``simple`` (breweries, styles, beers) and ``default``
(adds pubs and handpumps). Each has a DDL script, a data script and a JSON
configuration mapping suitable for ``application(config=...)``.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from src.core.errors import UnknownFixtureError

CANNED_ROOT = Path(__file__).resolve().parents[1] / "canned"
SCRIPT_KINDS = ("ddl", "data")
VARIANTS = ("simple", "default")


def _check(value: str, allowed: tuple[str, ...], label: str) -> None:
    if value not in allowed:
        raise UnknownFixtureError(
            f"unknown {label} {value!r}",
            title="Unknown Canned Fixture",
            remediation=f"Use one of: {', '.join(allowed)}.",
        )


def canned_script(kind: str, variant: str = "simple") -> Path:
    """Path of the ``ddl`` or ``data`` script for a beer-database variant."""
    _check(kind, SCRIPT_KINDS, "script kind")
    _check(variant, VARIANTS, "variant")
    return CANNED_ROOT / "sql" / kind / f"beerdb.{variant}.sql"


def canned_scripts(variant: str = "simple") -> tuple[Path, Path]:
    return canned_script("ddl", variant), canned_script("data", variant)


def canned_config_path(variant: str = "simple") -> Path:
    _check(variant, VARIANTS, "variant")
    return CANNED_ROOT / "config" / f"beerdb.{variant}.json"


def canned_config(variant: str = "simple") -> dict[str, Any]:
    # A fresh dict per call; callers usually add their own dsn.
    with canned_config_path(variant).open(encoding="utf-8") as stream:
        return json.load(stream)


__all__ = [
    "CANNED_ROOT",
    "SCRIPT_KINDS",
    "VARIANTS",
    "canned_config",
    "canned_config_path",
    "canned_script",
    "canned_scripts",
]
