from typing import Generator, Optional, Self
from pathlib import Path

import click

from .errors import DirtyDatabase, InvalidVersion, MigrationNotFound, NilVersion, NoChange, ShortLimit
from .migration import Migration
from .source import MigrationSource
from .target import NIL_VERSION, AbstractTarget, PostgreSqlTarget


class Migrator:
    """
    Moves a target database between the versions of a migration source.

    Each migration is applied in three steps: the target version is recorded
    as dirty, the statements run, and the version is recorded as clean. A
    failing statement leaves the dirty marker behind, which blocks further
    migrations until it is resolved with `force`.
    """

    source: MigrationSource
    target: AbstractTarget

    def __init__(self, source: MigrationSource, target: AbstractTarget) -> None:
        self.source = source
        self.target = target

    @classmethod
    def open(cls, dsn: str, directory: Path | str) -> Self:
        source = MigrationSource.from_directory(directory)
        return cls(source, PostgreSqlTarget.from_dsn(dsn))

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.target.close()

    def version(self) -> tuple[int, bool]:
        version, dirty = self.target.read_version()
        if version == NIL_VERSION:
            raise NilVersion()
        return version, dirty

    def force(self, version: int) -> None:
        if version < NIL_VERSION:
            raise InvalidVersion(version)
        with self.target.lock():
            self.target.set_version(version, False)

    def up(self) -> None:
        with self.target.lock():
            current = self._clean_version()
            pending = list(self._read_up(current, limit=None))
            if not pending:
                raise NoChange()
            self._apply_up(pending)

    def down(self) -> None:
        with self.target.lock():
            current = self._clean_version()
            applied = list(self._read_down(current, limit=None))
            if not applied:
                raise NoChange()
            self._apply_down(applied)

    def steps(self, n: int) -> None:
        if n == 0:
            raise NoChange()
        with self.target.lock():
            current = self._clean_version()
            if n > 0:
                chosen = list(self._read_up(current, limit=n))
            else:
                chosen = list(self._read_down(current, limit=-n))
            if not chosen:
                raise NoChange()

            if n > 0:
                self._apply_up(chosen)
            else:
                self._apply_down(chosen)

            if len(chosen) < abs(n):
                raise ShortLimit(abs(n) - len(chosen))

    def migrate(self, version: int) -> None:
        with self.target.lock():
            current = self._clean_version()
            if version not in self.source:
                raise MigrationNotFound(version, self.source.directory)
            if version == current:
                raise NoChange()

            if current == NIL_VERSION or version > current:
                self._apply_up([m for m in self._read_up(current, limit=None) if m.version <= version])
            else:
                self._apply_down([m for m in self._read_down(current, limit=None) if m.version > version])

    def _clean_version(self) -> int:
        version, dirty = self.target.read_version()
        if dirty:
            raise DirtyDatabase(version)
        if version != NIL_VERSION and version not in self.source:
            raise MigrationNotFound(version, self.source.directory)
        return version

    def _read_up(self, current: int, limit: Optional[int]) -> Generator[Migration, None, None]:
        """Pending migrations after `current`, in ascending order."""
        m = self.source.next(current)
        count = 0
        while m is not None and (limit is None or count < limit):
            yield m
            count += 1
            m = self.source.next(m.version)

    def _read_down(self, current: int, limit: Optional[int]) -> Generator[Migration, None, None]:
        """Applied migrations up to and including `current`, in descending order."""
        if current == NIL_VERSION:
            return
        m = self.source.get(current)
        count = 0
        while m is not None and (limit is None or count < limit):
            yield m
            count += 1
            m = self.source.prev(m.version)

    def _apply_up(self, migrations: list[Migration]) -> None:
        n = str(len(migrations))
        nn = len(n)
        for i, m in enumerate(migrations):
            click.echo(f"[ {i+1: >{nn}} / {n} ] Run migration {m}")
            statements = m.commands_of_up_script
            self.target.set_version(m.version, True)
            self.target.run(statements)
            self.target.set_version(m.version, False)

    def _apply_down(self, migrations: list[Migration]) -> None:
        n = str(len(migrations))
        nn = len(n)
        for i, m in enumerate(migrations):
            click.echo(f"[ {i+1: >{nn}} / {n} ] Revert migration {m}")
            previous = self.source.prev(m.version)
            version = previous.version if previous else NIL_VERSION
            statements = m.commands_of_down_script
            self.target.set_version(version, True)
            self.target.run(statements)
            self.target.set_version(version, False)
