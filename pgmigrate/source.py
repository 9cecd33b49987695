from bisect import bisect_left, bisect_right
from pathlib import Path
from typing import Dict, Generator, Optional, Self
import re

from .errors import DuplicateMigration, MigrationNotFound
from .migration import Migration
from .utils import sanitize_name, sequence_version, timestamp_version


migration_file = re.compile(r"^([0-9]+)_(.*)\.(down|up)\.(.+)$")

UP_PLACEHOLDER = "-- write UP migration here\n"
DOWN_PLACEHOLDER = "-- write DOWN migration here\n"


class MigrationSource:
    """
    Migrations read from a directory of `<version>_<name>.<up|down>.<ext>` files,
    ordered by their numeric version.
    """

    directory: Path
    _migrations: Dict[int, Migration]
    _versions: list[int]

    def __init__(self, directory: Path, load: bool = True) -> None:
        self.directory = Path(directory)
        self._migrations = {}
        self._versions = []
        if load:
            self._load_migrations()

    @classmethod
    def from_directory(cls, directory: Path | str) -> Self:
        directory = Path(directory)
        if not directory.is_dir():
            raise NotADirectoryError(f"migrations dir {directory} not found")
        return cls(directory)

    def __repr__(self) -> str:
        return f"MigrationSource(directory={self.directory}, versions={len(self._versions)})"

    def _discover_migrations(self) -> Generator[tuple[int, str, str, Path], None, None]:
        for child in self.directory.iterdir():
            if not child.is_file():
                continue
            if not (match := migration_file.match(child.name)):
                continue
            version, name, direction, _ = match.groups()
            yield int(version), name, direction, child

    def _load_migrations(self) -> Dict[int, Migration]:
        self._migrations = {}
        self._versions = []
        # A directory that does not exist yet holds no migrations.
        if not self.directory.is_dir():
            return self._migrations
        for version, name, direction, path in self._discover_migrations():
            migration = self._migrations.setdefault(version, Migration(version=version, name=name))
            attribute = f"{direction}_path"
            if (existing := getattr(migration, attribute)) is not None:
                raise DuplicateMigration(existing, path)
            setattr(migration, attribute, path)
        self._versions = sorted(self._migrations)
        return self._migrations

    @property
    def versions(self) -> list[int]:
        return list(self._versions)

    @property
    def migrations(self) -> list[Migration]:
        return [self._migrations[v] for v in self._versions]

    def __contains__(self, version: int) -> bool:
        return version in self._migrations

    def __len__(self) -> int:
        return len(self._versions)

    def get(self, version: int) -> Migration:
        try:
            return self._migrations[version]
        except KeyError as e:
            raise MigrationNotFound(version, self.directory) from e

    def first(self) -> Optional[Migration]:
        return self._migrations[self._versions[0]] if self._versions else None

    def next(self, version: int) -> Optional[Migration]:
        """Migration following `version`, or the first one if `version` is -1."""
        i = bisect_right(self._versions, version)
        return self._migrations[self._versions[i]] if i < len(self._versions) else None

    def prev(self, version: int) -> Optional[Migration]:
        i = bisect_left(self._versions, version)
        return self._migrations[self._versions[i - 1]] if i > 0 else None

    def next_sequence(self) -> int:
        return self._versions[-1] + 1 if self._versions else 1

    def create_pair(self, name: str, version: Optional[str] = None) -> tuple[Path, Path]:
        """
        Write an empty up/down pair for a new migration.
        Either both files exist afterwards or none does.
        """
        version = version or timestamp_version()
        name = sanitize_name(name)
        base = f"{version}_{name}"
        up = self.directory / f"{base}.up.sql"
        down = self.directory / f"{base}.down.sql"
        for path in (up, down):
            if path.exists():
                raise FileExistsError(f"Cannot create migration, because {path} already exists.")

        self.directory.mkdir(parents=True, exist_ok=True)
        up.write_text(UP_PLACEHOLDER, encoding="utf-8")
        try:
            down.write_text(DOWN_PLACEHOLDER, encoding="utf-8")
        except OSError:
            up.unlink(missing_ok=True)
            raise

        if int(version) not in self._migrations:
            self._migrations[int(version)] = Migration(int(version), name, up_path=up, down_path=down)
            self._versions = sorted(self._migrations)
        return up, down

    @classmethod
    def create(
        cls,
        directory: Path | str,
        name: str,
        sequential: bool = False,
        digits: int = 6,
    ) -> tuple[Path, Path]:
        # Only sequential numbering needs to know the existing migrations.
        source = cls(directory, load=sequential)
        version = sequence_version(source.next_sequence(), digits) if sequential else None
        return source.create_pair(name, version)
