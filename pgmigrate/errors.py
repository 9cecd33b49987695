from typing import Optional


class MigrationError(Exception):
    pass


class NoChange(MigrationError):
    def __init__(self) -> None:
        super().__init__("no change")


class NilVersion(MigrationError):
    def __init__(self) -> None:
        super().__init__("no migration")


class InvalidVersion(MigrationError, ValueError):
    def __init__(self, version: int) -> None:
        self.version = version
        super().__init__(f"invalid version {version}")


class DirtyDatabase(MigrationError):
    def __init__(self, version: int) -> None:
        self.version = version
        super().__init__(f"Dirty database version {version}. Fix and force version.")


class ShortLimit(MigrationError):
    """Fewer migrations were available than requested."""

    def __init__(self, short: int) -> None:
        self.short = short
        super().__init__(f"limit {short} short")


class MigrationNotFound(MigrationError, LookupError):
    def __init__(self, version: int, directory: Optional[object] = None) -> None:
        self.version = version
        where = f" in {directory}" if directory else ""
        super().__init__(f"no migration found for version {version}{where}")


class DuplicateMigration(MigrationError, ValueError):
    def __init__(self, first: object, second: object) -> None:
        super().__init__(f"duplicate migration file: {second} (conflicts with {first})")
