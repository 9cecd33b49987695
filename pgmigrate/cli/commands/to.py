import click
from pathlib import Path

from ..groups import root
from ..utils import complete_available_version, directory_option, dsn_option, migrator


@root.command("to")
@click.argument("version", type=click.IntRange(min=0), shell_complete=complete_available_version)
@dsn_option
@directory_option()
def migrate_to(version: int, dsn: str, directory: Path):
    """Migrate up or down to exactly VERSION."""
    with migrator(dsn, directory) as m:
        m.migrate(version)
