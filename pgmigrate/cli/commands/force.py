import click
from pathlib import Path

from ..groups import root
from ..utils import complete_available_version, directory_option, dsn_option, migrator


@root.command()
@click.argument("version", type=click.IntRange(min=-1), shell_complete=complete_available_version)
@dsn_option
@directory_option()
def force(version: int, dsn: str, directory: Path):
    """
    Set the version marker to VERSION without running any SQL.

    Use it to recover from a dirty database after fixing a failed migration by hand.
    -1 removes the marker, pass it as `force -- -1`.
    """
    with migrator(dsn, directory) as m:
        m.force(version)
