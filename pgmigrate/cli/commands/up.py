import click
from pathlib import Path

from ..groups import root
from ..utils import directory_option, dsn_option, migrator


@root.command("up")
@click.option(
    "--steps",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Apply N pending migrations, 0 applies all of them.",
)
@dsn_option
@directory_option()
def up_migration(steps: int, dsn: str, directory: Path):
    """Apply pending migrations."""
    with migrator(dsn, directory) as m:
        if steps > 0:
            m.steps(steps)
        else:
            m.up()
