from pathlib import Path

import click

from ..groups import root
from ..utils import directory_option, dsn_option, migrator
from ...errors import NilVersion


@root.command("version")
@dsn_option
@directory_option()
def print_version(dsn: str, directory: Path):
    """Print the current version and whether the database is dirty."""
    with migrator(dsn, directory) as m:
        try:
            version, dirty = m.version()
        except NilVersion:
            click.echo("version: 0, dirty=false (no migrations applied)")
            return
        click.echo(f"version: {version}, dirty={str(dirty).lower()}")
