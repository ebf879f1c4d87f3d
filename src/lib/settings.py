from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from src.logging.config import parse_level

INSTALL_PREFIX_ENV = "WEBAPP_TEMPLATES_INSTALL_PREFIX"
KEEP_FILES_ENV = "WEBAPP_DEVKIT_KEEP_FILES"
LOG_LEVEL_ENV = "WEBAPP_DEVKIT_LOG_LEVEL"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class DevkitSettings:
    """Environment-derived defaults. Explicit call arguments always take precedence."""

    install_prefix: Optional[str] = None
    keep_files: bool = False
    log_level: int = logging.INFO

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "DevkitSettings":
        env = os.environ if environ is None else environ
        prefix = env.get(INSTALL_PREFIX_ENV) or None
        keep = env.get(KEEP_FILES_ENV, "").strip().lower() in _TRUTHY
        return cls(
            install_prefix=prefix,
            keep_files=keep,
            log_level=_parse_level(env.get(LOG_LEVEL_ENV)),
        )


def resolve_keep(keep: bool | None, environ: Mapping[str, str] | None = None) -> bool:
    if keep is not None:
        return bool(keep)
    return DevkitSettings.from_env(environ).keep_files


def _parse_level(value: str | None) -> int:
    try:
        return parse_level(value)
    except ValueError:
        # a typo in the environment should not stop the CLI
        return logging.INFO


__all__ = [
    "DevkitSettings",
    "resolve_keep",
    "INSTALL_PREFIX_ENV",
    "KEEP_FILES_ENV",
    "LOG_LEVEL_ENV",
]
