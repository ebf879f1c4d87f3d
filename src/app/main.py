from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import click

from src.core.errors import UserFacingError
from src.lib.canned import VARIANTS, canned_scripts
from src.lib.settings import DevkitSettings
from src.logging.config import LEVEL_NAMES, configure_logging
from src.services.application_generator import generate_application
from src.services.database_builder import build_database
from src.services.template_installer import install_templates


def _fail(exc: UserFacingError) -> click.ClickException:
    message = f"{exc.title}: {exc}"
    if exc.remediation:
        message = f"{message}\n{exc.remediation}"
    return click.ClickException(message)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LEVEL_NAMES, case_sensitive=False),
    default=None,
    help="Override WEBAPP_DEVKIT_LOG_LEVEL.",
)
def cli(log_level: Optional[str]) -> None:
    """Fixture and template helpers for framework plugin development."""
    configure_logging(log_level or DevkitSettings.from_env().log_level)


@cli.command()
@click.argument("ddl", type=click.Path(exists=True, dir_okay=False), required=False)
@click.argument("data", type=click.Path(exists=True, dir_okay=False), required=False)
@click.option(
    "--canned",
    type=click.Choice(VARIANTS),
    default=None,
    help="Use the bundled beer database scripts for any script not given.",
)
@click.option(
    "--directory",
    type=click.Path(file_okay=False, dir_okay=True),
    default=None,
    help="Where to create the database file (default: system temp dir).",
)
def database(ddl: Optional[str], data: Optional[str], canned: Optional[str], directory: Optional[str]) -> None:
    """Build a fixture database and print its connection descriptor."""
    if canned:
        canned_ddl, canned_data = canned_scripts(canned)
        ddl = ddl or str(canned_ddl)
        data = data or str(canned_data)
    try:
        handle = build_database(ddl, data, keep=True, directory=directory)
    except UserFacingError as exc:
        raise _fail(exc) from exc
    click.echo(handle.dsn)


@cli.command()
@click.option("--plugin", "plugins", multiple=True, help="Plugin name; repeat for several.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON file holding the configuration mapping.",
)
@click.option(
    "--directory",
    type=click.Path(file_okay=False, dir_okay=True),
    default=None,
    help="Where to write the driver module (default: current directory).",
)
def application(plugins: tuple[str, ...], config_path: Optional[str], directory: Optional[str]) -> None:
    """Write an application driver module and print its module name."""
    config = None
    if config_path:
        try:
            config = json.loads(Path(config_path).read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise click.ClickException(f"Invalid JSON in {config_path}: {exc}") from exc
    try:
        handle = generate_application(list(plugins), config, keep=True, directory=directory)
    except UserFacingError as exc:
        raise _fail(exc) from exc
    click.echo(handle.module_name)


@cli.command("install-templates")
@click.argument("package")
@click.argument("source", type=click.Path(file_okay=False, dir_okay=True))
@click.argument("subpath", required=False, default="")
@click.option("--prefix", default=None, help="Installation root; skips the prompt.")
def install_templates_command(package: str, source: str, subpath: str, prefix: Optional[str]) -> None:
    """Copy SOURCE into the template root for PACKAGE."""
    try:
        result = install_templates(package, source, subpath, prefix=prefix)
    except UserFacingError as exc:
        raise _fail(exc) from exc
    if result is None:
        click.echo("Templates not installed.")
        return
    click.echo(f"Installed {result.files_copied} file(s) into {result.destination}")


if __name__ == "__main__":  # pragma: no cover
    cli()
