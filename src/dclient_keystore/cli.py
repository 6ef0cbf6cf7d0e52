"""Command-line interface for the dclient keystore."""

import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from dclient_keystore import __version__
from dclient_keystore.audit import EventType, audit_event, setup_logging
from dclient_keystore.config import (
    LOG_LEVELS,
    KeystoreSettings,
    program_identity_from_argv,
)
from dclient_keystore.keystore import AUDIT_USER, Keystore
from dclient_keystore.storage import KeystoreError

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Set logging level",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Override the per-user data directory",
)
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], data_dir: Optional[Path]) -> None:
    """Manage locally stored signing keypairs."""
    overrides = dict(ctx.obj or {})
    if log_level:
        overrides["log_level"] = log_level
    if data_dir:
        overrides["data_dir"] = data_dir

    try:
        settings = KeystoreSettings(**overrides)
        setup_logging(
            log_level=settings.log_level,
            base_dir=settings.resolve_log_dir(),
            log_name=settings.program_identity,
        )
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}")
    except OSError as e:
        raise click.ClickException(f"Failed to set up logging: {e}")

    audit_event(
        EventType.SYS_STARTUP,
        AUDIT_USER,
        True,
        {
            "program_identity": settings.program_identity,
            "command": ctx.invoked_subcommand,
        },
    )
    ctx.obj = Keystore.from_settings(settings)


@cli.command()
@click.argument("name")
@click.pass_obj
def new(keystore: Keystore, name: str) -> None:
    """Generate a new keypair and store it as NAME."""
    try:
        path = keystore.generate_and_save(name)
    except (KeystoreError, ValueError) as e:
        raise click.ClickException(str(e))

    click.echo(f"Created keypair '{name}' at {path}")


@cli.command(name="import")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
def import_keypair(keystore: Keystore, path: Path) -> None:
    """Import the keypair file at PATH into the store."""
    try:
        record = keystore.import_and_normalize(path)
    except KeystoreError as e:
        raise click.ClickException(str(e))

    click.echo(
        f"Imported keypair '{record.name}' to "
        f"{keystore.credential_path(record.name)}"
    )


@cli.command(name="list")
@click.pass_obj
def list_keypairs(keystore: Keystore) -> None:
    """List stored keypairs."""
    try:
        names = keystore.list_stored_names()
    except KeystoreError as e:
        raise click.ClickException(f"{e} (create a keypair with 'new' first)")

    if not names:
        click.echo("No keypairs found.")
        return

    table = Table(title="Stored Keypairs")
    table.add_column("Name", style="cyan", no_wrap=True)
    for name in names:
        table.add_row(name)
    console.print(table)


@cli.command()
@click.argument("name")
@click.pass_obj
def show(keystore: Keystore, name: str) -> None:
    """Show the public half of the stored keypair NAME."""
    try:
        record = keystore.read_stored(name)
    except (KeystoreError, ValueError) as e:
        raise click.ClickException(str(e))

    click.echo(f"Name: {record.name}")
    click.echo(f"Path: {keystore.credential_path(record.name)}")
    click.echo(f"Public key: {record.public_key_bytes.hex()}")


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output bundle path")
@click.option("--dylib-ios", is_flag=True, help="Output shared object files for iOS")
@click.pass_obj
def pack(
    keystore: Keystore, path: Path, output: Optional[Path], dylib_ios: bool
) -> None:
    """Pack the working directory at PATH into a bundle."""
    try:
        keystore.unimplemented("pack")
    except KeystoreError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output directory")
@click.option("-r", "--raw", is_flag=True, help="Do not parse the manifest")
@click.option("-f", "--force", is_flag=True, help="Overwrite an existing directory")
@click.pass_obj
def unpack(
    keystore: Keystore,
    path: Path,
    output: Optional[Path],
    raw: bool,
    force: bool,
) -> None:
    """Unpack the bundle at PATH into a directory."""
    try:
        keystore.unimplemented("unpack")
    except KeystoreError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.pass_obj
def schema(keystore: Keystore) -> None:
    """Print the schema for a bundle manifest."""
    try:
        keystore.unimplemented("schema")
    except KeystoreError as e:
        raise click.ClickException(str(e))


def main() -> None:
    """CLI entry point for the ``dclient`` and ``hetu`` executables."""
    identity = program_identity_from_argv(sys.argv[0] if sys.argv else None)
    cli(obj={"program_identity": identity}, prog_name=identity)
