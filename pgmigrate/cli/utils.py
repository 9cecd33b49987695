from contextlib import contextmanager
from pathlib import Path
from typing import Generator
import os

import click
import psycopg

from ..errors import MigrationError, NoChange
from ..migrator import Migrator
from ..source import MigrationSource


DEFAULT_MIGRATIONS_DIR = "migrations"


def complete_available_version(ctx, param, incomplete):
    directory = (
        ctx.params.get("directory")
        or os.environ.get("MIGRATIONS_DIR")
        or DEFAULT_MIGRATIONS_DIR
    )
    try:
        source = MigrationSource.from_directory(directory)
    except (NotADirectoryError, MigrationError):
        return []
    else:
        return [
            str(m.version)
            for m in source.migrations
            if str(m.version).startswith(incomplete)
        ]


def dsn_option(f):
    return click.option(
        "--dsn",
        envvar="DATABASE_URL",
        required=True,
        show_envvar=True,
        help="PostgreSQL connection string.",
    )(f)


def directory_option(must_exist: bool = True):
    return click.option(
        "directory",
        "--dir",
        envvar="MIGRATIONS_DIR",
        default=DEFAULT_MIGRATIONS_DIR,
        show_default=True,
        show_envvar=True,
        type=click.Path(
            exists=must_exist,
            file_okay=False,
            dir_okay=True,
            path_type=Path,
        ),
        help="Directory holding the migration files.",
    )


@contextmanager
def migrator(dsn: str, directory: Path) -> Generator[Migrator, None, None]:
    """
    Open a migrator for the duration of a command.
    "No change" is reported as success, every other failure ends the command with an error.
    """
    try:
        with Migrator.open(dsn, directory) as m:
            yield m
    except NoChange:
        click.echo("no change")
    except (MigrationError, psycopg.Error, OSError, UnicodeDecodeError) as e:
        raise click.ClickException(str(e)) from e
