import click
import typing
from pathlib import Path

from ..groups import root
from ..utils import directory_option, dsn_option, migrator


@root.command("down")
@click.option("--steps", type=click.IntRange(min=1), default=None, help="Roll back N migrations.")
@click.option("revert_all", "--all", is_flag=True, default=False, help="Roll back all migrations.")
@dsn_option
@directory_option()
def down_migration(steps: typing.Optional[int], revert_all: bool, dsn: str, directory: Path):
    """Roll back applied migrations."""
    if revert_all == (steps is not None):
        raise click.UsageError("specify --steps or --all")

    with migrator(dsn, directory) as m:
        if revert_all:
            m.down()
        else:
            m.steps(-steps)
