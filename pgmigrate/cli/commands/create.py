import click
from pathlib import Path

from ..groups import root
from ..utils import directory_option
from ...errors import MigrationError
from ...source import MigrationSource
from ...utils import sanitize_name


@root.command()
@click.argument("name")
@directory_option(must_exist=False)
@click.option(
    "sequential",
    "--seq",
    is_flag=True,
    default=False,
    help="Number the migration after the highest existing version instead of using a timestamp.",
)
@click.option("--digits", type=click.IntRange(min=1), default=6, show_default=True)
def create(name: str, directory: Path, sequential: bool, digits: int):
    """Create an empty up/down pair of SQL files."""
    if not sanitize_name(name):
        raise click.UsageError("Migration name must not be empty.")

    try:
        up, down = MigrationSource.create(directory, name, sequential=sequential, digits=digits)
    except FileExistsError as e:
        raise click.UsageError(str(e)) from e
    except (OSError, MigrationError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    click.echo("created:")
    click.echo(f"  {up}")
    click.echo(f"  {down}")
