from .errors import (
    DirtyDatabase,
    DuplicateMigration,
    InvalidVersion,
    MigrationError,
    MigrationNotFound,
    NilVersion,
    NoChange,
    ShortLimit,
)
from .migration import Migration
from .migrator import Migrator
from .source import MigrationSource
from .target import AbstractTarget, PostgreSqlTarget
