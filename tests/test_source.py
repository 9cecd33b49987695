from unittest.mock import patch

import pytest

from pgmigrate.errors import DuplicateMigration, MigrationNotFound
from pgmigrate.source import DOWN_PLACEHOLDER, UP_PLACEHOLDER, MigrationSource

from .conftest import write_pair


def test_versions_are_ordered_numerically(tmp_path):
    write_pair(tmp_path, 10, "ten", up="select 10;")
    write_pair(tmp_path, 9, "nine", up="select 9;")
    write_pair(tmp_path, 100, "hundred", down="select 100;")
    source = MigrationSource(tmp_path)
    assert source.versions == [9, 10, 100]


def test_unrelated_files_are_ignored(migrations_dir):
    (migrations_dir / "README.md").write_text("notes")
    (migrations_dir / "seed.sql").write_text("select 1;")
    (migrations_dir / "5_nested.up.sql").mkdir()
    assert MigrationSource(migrations_dir).versions == [1, 3, 7]


def test_navigation(source):
    assert source.first().version == 1
    assert source.next(-1).version == 1
    assert source.next(1).version == 3
    assert source.next(7) is None
    assert source.prev(7).version == 3
    assert source.prev(1) is None
    assert 3 in source
    assert 4 not in source
    assert len(source) == 3


def test_get_unknown_version(source):
    with pytest.raises(MigrationNotFound):
        source.get(4)


def test_migration_files_and_commands(source):
    m = source.get(7)
    assert m.name == "index"
    assert m.up_path.name == "7_index.up.sql"
    assert m.down_path.name == "7_index.down.sql"
    assert m.commands_of_down_script == ["drop index users_id;"]
    assert len(m.commands_of_up_script) == 1


def test_missing_down_file_has_no_commands(tmp_path):
    write_pair(tmp_path, 1, "only_up", up="select 1;")
    m = MigrationSource(tmp_path).get(1)
    assert m.down_path is None
    assert m.commands_of_down_script == []


def test_duplicate_migration_files(tmp_path):
    write_pair(tmp_path, 1, "first", up="select 1;")
    write_pair(tmp_path, 1, "second", up="select 2;")
    with pytest.raises(DuplicateMigration):
        MigrationSource(tmp_path)


def test_from_directory_requires_existing_directory(tmp_path):
    with pytest.raises(NotADirectoryError):
        MigrationSource.from_directory(tmp_path / "missing")


def test_create_pair_writes_placeholders(tmp_path):
    directory = tmp_path / "db" / "migrations"
    up, down = MigrationSource(directory).create_pair("Add Users", "20240101120000")
    assert up == directory / "20240101120000_add_users.up.sql"
    assert down == directory / "20240101120000_add_users.down.sql"
    assert up.read_text() == UP_PLACEHOLDER
    assert down.read_text() == DOWN_PLACEHOLDER


def test_create_pair_refuses_to_overwrite(migrations_dir):
    source = MigrationSource(migrations_dir)
    with pytest.raises(FileExistsError):
        source.create_pair("users", "1")
    assert (migrations_dir / "1_users.up.sql").read_text() == "create table users (id int);"


def test_create_pair_removes_up_file_when_down_fails(tmp_path):
    original_write_text = type(tmp_path).write_text

    def write_text(path, *args, **kwargs):
        if path.name.endswith(".down.sql"):
            raise PermissionError("read-only")
        return original_write_text(path, *args, **kwargs)

    with patch.object(type(tmp_path), "write_text", write_text):
        with pytest.raises(PermissionError):
            MigrationSource(tmp_path).create_pair("broken", "1")
    assert list(tmp_path.iterdir()) == []


def test_create_sequential(migrations_dir):
    up, down = MigrationSource.create(migrations_dir, "next", sequential=True)
    assert up.name == "000008_next.up.sql"
    assert down.name == "000008_next.down.sql"


def test_create_sequential_in_empty_directory(tmp_path):
    up, _ = MigrationSource.create(tmp_path / "new", "first", sequential=True, digits=3)
    assert up.name == "001_first.up.sql"


def test_create_with_timestamp_ignores_unrelated_duplicates(tmp_path):
    write_pair(tmp_path, 1, "first", up="select 1;")
    write_pair(tmp_path, 1, "second", up="select 2;")
    up, down = MigrationSource.create(tmp_path, "next")
    assert up.is_file() and down.is_file()


def test_create_sequential_reports_duplicates(tmp_path):
    write_pair(tmp_path, 1, "first", up="select 1;")
    write_pair(tmp_path, 1, "second", up="select 2;")
    with pytest.raises(DuplicateMigration):
        MigrationSource.create(tmp_path, "next", sequential=True)
