from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Mapping, Optional, Protocol, Sequence

import click

from src.core.errors import TemplateInstallError, missing_argument
from src.lib.paths import install_roots, package_to_path, split_segments
from src.lib.settings import DevkitSettings

PROMPT_TITLE = "Template installation location:"
OTHER_CHOICE = "other"
DO_NOT_INSTALL_CHOICE = "do not install templates"

_logger = logging.getLogger(__name__)


class Prompter(Protocol):
    def pick(self, question: str, options: Sequence[str], default: int = 1) -> str:
        """Return one of ``options``; ``default`` is 1-based."""

    def ask(self, question: str, default: str) -> str:
        """Return free text, ``default`` on empty input."""


class ClickPrompter:
    """Terminal prompts: a numbered menu followed by an optional free-text question."""

    def pick(self, question: str, options: Sequence[str], default: int = 1) -> str:
        click.echo(question)
        for index, option in enumerate(options, start=1):
            click.echo(f"  [{index}] {option}")
        choice = click.prompt(
            "Choose a number",
            type=click.IntRange(1, len(options)),
            default=default,
            show_default=True,
        )
        return options[choice - 1]

    def ask(self, question: str, default: str) -> str:
        return click.prompt(question, default=default, show_default=True)


@dataclass(frozen=True)
class InstallPlan:
    root: Path
    package_path: PurePosixPath
    subpath: tuple[str, ...]
    destination: Path


@dataclass(slots=True)
class InstallResult:
    destination: Path
    files_copied: int
    directories_created: int


def prompt_for_install_root(prompter: Prompter, *, platform: Optional[str] = None) -> Optional[str]:
    """Ask for a root. ``None`` means the user declined; ``""`` may come back from "other"."""
    default_root, alternates = install_roots(platform)
    options = [default_root, *alternates, OTHER_CHOICE, DO_NOT_INSTALL_CHOICE]
    choice = prompter.pick(PROMPT_TITLE, options, 1)
    if choice == DO_NOT_INSTALL_CHOICE:
        return None
    if choice == OTHER_CHOICE:
        return prompter.ask(PROMPT_TITLE, default_root)
    return choice


def resolve_install_root(
    *,
    prefix: Optional[str | os.PathLike[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    prompter: Optional[Prompter] = None,
    platform: Optional[str] = None,
) -> Optional[str]:
    """Explicit prefix, then the environment override, then the interactive menu."""
    if prefix:
        return os.fspath(prefix)
    settings = DevkitSettings.from_env(environ)
    if settings.install_prefix:
        return settings.install_prefix
    return prompt_for_install_root(prompter or ClickPrompter(), platform=platform)


def plan_install(
    root: str | os.PathLike[str],
    package: str,
    subpath: Optional[str | os.PathLike[str]] = None,
) -> InstallPlan:
    package_path = package_to_path(package)
    segments = tuple(split_segments(subpath))
    destination = Path(root).joinpath(*package_path.parts, *segments)
    return InstallPlan(
        root=Path(root),
        package_path=package_path,
        subpath=segments,
        destination=destination,
    )


def copy_tree(source: str | os.PathLike[str], destination: Path) -> InstallResult:
    """Recursively copy ``source`` into ``destination``; copied files stay on failure."""
    source_dir = Path(source) if source else None
    if source_dir is None or not source_dir.is_dir():
        raise TemplateInstallError(
            f"nothing copied: template directory not found: {source!r}",
            title="Template Install Failed",
            remediation="Pass the path to the templates directory in your distribution.",
        )

    files = 0
    directories = 0
    try:
        # Linked directories are copied as real ones; a link back into its own
        # ancestry would never finish.
        for current, dirnames, filenames in os.walk(source_dir, followlinks=True):
            dirnames.sort()
            _reject_symlink_loops(Path(current), dirnames, files)
            target_dir = destination / Path(current).relative_to(source_dir)
            if not target_dir.is_dir():
                target_dir.mkdir(parents=True)
                directories += 1
            for name in sorted(filenames):
                shutil.copy2(Path(current) / name, target_dir / name)
                files += 1
    except OSError as exc:
        raise TemplateInstallError(
            f"{_progress(files)}: {exc}",
            title="Template Install Failed",
            remediation="Check permissions on the installation root or choose another location.",
        ) from exc
    return InstallResult(destination=destination, files_copied=files, directories_created=directories)


def _progress(files: int) -> str:
    return "nothing copied" if files == 0 else f"copy stopped after {files} file(s)"


def _reject_symlink_loops(current: Path, dirnames: list[str], files: int) -> None:
    resolved = current.resolve()
    for name in dirnames:
        link = current / name
        if link.is_symlink() and resolved.is_relative_to(link.resolve()):
            raise TemplateInstallError(
                f"{_progress(files)}: symlink loop at {link}",
                title="Template Install Failed",
                remediation="Replace the link with a copy of the templates it points to.",
            )


def install_templates(
    package: Optional[str],
    source: str | os.PathLike[str] = "",
    subpath: Optional[str | os.PathLike[str]] = "",
    *,
    prefix: Optional[str | os.PathLike[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    prompter: Optional[Prompter] = None,
    platform: Optional[str] = None,
) -> Optional[InstallResult]:
    """Install a plugin's template set under the framework template root.

    ``webapp.plugin.foo`` with subpath ``set1`` lands in
    ``<root>/webapp/plugin/foo/set1``. Returns ``None`` when the user chose
    not to install or gave an empty location.
    """
    if not package:
        raise missing_argument("package", "a package name for installing templates")

    root = resolve_install_root(prefix=prefix, environ=environ, prompter=prompter, platform=platform)
    context = {"operation": "install_templates", "package": package}
    if root is None:
        _logger.info("Template installation declined", extra=context)
        return None
    if not root.strip():
        _logger.info("Template installation skipped, empty location", extra=context)
        return None

    plan = plan_install(root.strip(), package, subpath)
    context["destination"] = str(plan.destination)
    try:
        result = copy_tree(source, plan.destination)
    except TemplateInstallError:
        _logger.error("Template installation failed", extra=context, exc_info=True)
        raise
    _logger.info(
        "Templates installed",
        extra={**context, "files": result.files_copied, "directories": result.directories_created},
    )
    return result


__all__ = [
    "ClickPrompter",
    "InstallPlan",
    "InstallResult",
    "Prompter",
    "copy_tree",
    "install_templates",
    "plan_install",
    "prompt_for_install_root",
    "resolve_install_root",
    "DO_NOT_INSTALL_CHOICE",
    "OTHER_CHOICE",
]
