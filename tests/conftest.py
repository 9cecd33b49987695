from contextlib import contextmanager

import pytest

from pgmigrate.source import MigrationSource
from pgmigrate.target import NIL_VERSION, AbstractTarget


class MemoryTarget(AbstractTarget):
    """Keeps the version marker in memory and records what would have been executed."""

    def __init__(self, version: int = NIL_VERSION, dirty: bool = False, fail_on: str | None = None):
        self.version = version
        self.dirty = dirty
        self.fail_on = fail_on
        self.executed: list[str] = []
        self.history: list[tuple[int, bool]] = []
        self.locked = False
        self.closed = False

    def read_version(self):
        return self.version, self.dirty

    def set_version(self, version, dirty):
        self.version, self.dirty = version, dirty
        self.history.append((version, dirty))

    def run(self, statements):
        for cmd in statements:
            if self.fail_on and self.fail_on in cmd:
                raise RuntimeError(f"failed: {cmd}")
            self.executed.append(cmd)

    @contextmanager
    def lock(self):
        assert not self.locked
        self.locked = True
        try:
            yield
        finally:
            self.locked = False

    def close(self):
        self.closed = True


def write_pair(directory, version, name, up=None, down=None):
    if up is not None:
        (directory / f"{version}_{name}.up.sql").write_text(up, encoding="utf-8")
    if down is not None:
        (directory / f"{version}_{name}.down.sql").write_text(down, encoding="utf-8")


@pytest.fixture
def migrations_dir(tmp_path):
    directory = tmp_path / "migrations"
    directory.mkdir()
    write_pair(directory, 1, "users", up="create table users (id int);", down="drop table users;")
    write_pair(directory, 3, "posts", up="create table posts (id int);", down="drop table posts;")
    write_pair(
        directory,
        7,
        "index",
        up="-- index users\ncreate index users_id on users (id);\n",
        down="drop index users_id;",
    )
    return directory


@pytest.fixture
def source(migrations_dir):
    return MigrationSource.from_directory(migrations_dir)


@pytest.fixture
def target():
    return MemoryTarget()
