"""Path utilities for the devkit.

- Names and allocates the throwaway fixture files (databases, app drivers)
- Lists the template installation roots for the current platform
- Maps dotted package names onto relative template directories

Roots are kept as forward-slash strings so the Windows values read the same
on every host; callers turn them into ``Path`` objects.
"""
from __future__ import annotations

import os
import sys
import tempfile
from pathlib import Path, PurePosixPath
from typing import Optional

DB_FILE_PREFIX = "WebappTestDB_"
DB_FILE_SUFFIX = ".db"
APP_FILE_PREFIX = "WebappTestApp_"
APP_FILE_SUFFIX = ".py"

TEMPLATES_SUBDIR = "templates"

_WINDOWS_PREFIX = "C:/Program Files/Webapp"
_WINDOWS_ALTERNATES = (
    "C:/Program Files/Webapp2",
    "C:/Program Files/Python/Webapp",
    "C:/Program Files/Python/Webapp2",
)
_UNIX_PREFIX = "/usr/local/webapp"
_UNIX_ALTERNATES = (
    "/usr/local/webapp2",
    "/usr/lib/webapp",
    "/usr/lib/webapp2",
    "/usr/local/lib/webapp",
    "/usr/local/lib/webapp2",
    "/home/webapp",
    "/home/webapp2",
    "/usr/www/webapp",
    "/usr/www/webapp2",
    "/usr/local/www/webapp",
    "/usr/local/www/webapp2",
)


def allocate_temp_file(
    prefix: str, suffix: str, directory: Optional[str | os.PathLike[str]] = None
) -> Path:
    """Create an empty, uniquely named file and return its absolute path.

    The OS handle is closed before returning; SQLite treats a file that is
    still open elsewhere as locked.
    """
    target_dir = None if directory is None else str(directory)
    fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=target_dir)
    os.close(fd)
    return Path(name).resolve()


def is_windows(platform: Optional[str] = None) -> bool:
    return (platform or sys.platform) == "win32"


def install_roots(platform: Optional[str] = None) -> tuple[str, list[str]]:
    """Return ``(default_root, alternate_roots)`` with the templates subdir appended."""
    if is_windows(platform):
        prefix, alternates = _WINDOWS_PREFIX, _WINDOWS_ALTERNATES
    else:
        prefix, alternates = _UNIX_PREFIX, _UNIX_ALTERNATES
    return (
        f"{prefix}/{TEMPLATES_SUBDIR}",
        [f"{alt}/{TEMPLATES_SUBDIR}" for alt in alternates],
    )


def package_to_path(package: str) -> PurePosixPath:
    """Turn ``webapp.plugin.foo`` into ``webapp/plugin/foo``."""
    parts = [part for part in package.split(".") if part]
    return PurePosixPath(*parts)


def split_segments(value: str | os.PathLike[str] | None) -> list[str]:
    """Split a slash- or backslash-separated path into non-empty segments."""
    if not value:
        return []
    text = os.fspath(value).replace("\\", "/")
    return [segment for segment in text.split("/") if segment]


__all__ = [
    "DB_FILE_PREFIX",
    "DB_FILE_SUFFIX",
    "APP_FILE_PREFIX",
    "APP_FILE_SUFFIX",
    "TEMPLATES_SUBDIR",
    "allocate_temp_file",
    "install_roots",
    "is_windows",
    "package_to_path",
    "split_segments",
]
