from contextlib import contextmanager
from typing import Generator, Iterable, Self

from psycopg import Connection, sql
import click
import psycopg

from .utils import DEFAULT_MIGRATIONS_TABLE, advisory_lock_id, one_line, pop_migrations_table


NIL_VERSION = -1


class AbstractTarget:
    """
    The database side of a migration run.
    It persists a single version marker together with a dirty flag.
    """

    def read_version(self) -> tuple[int, bool]:
        raise NotImplementedError

    def set_version(self, version: int, dirty: bool) -> None:
        raise NotImplementedError

    def run(self, statements: Iterable[str]) -> None:
        raise NotImplementedError

    @contextmanager
    def lock(self) -> Generator[None, None, None]:
        yield

    def close(self) -> None:
        pass


class PostgreSqlTarget(AbstractTarget):
    connection: Connection
    table: str

    def __init__(self, connection: Connection, table: str = DEFAULT_MIGRATIONS_TABLE):
        self.connection = connection
        # Statements must commit one by one, so that a failure leaves the dirty marker behind.
        self.connection.autocommit = True
        self.table = table
        self.install_version_table()
        super().__init__()

    @classmethod
    def from_dsn(cls, dsn: str) -> Self:
        dsn, table = pop_migrations_table(dsn)
        connection = psycopg.connect(dsn)
        try:
            return cls(connection, table=table)
        except Exception:
            connection.close()
            raise

    def transaction(self):
        return self.connection.transaction()

    @property
    def table_identifier(self) -> sql.Identifier:
        return sql.Identifier(self.table)

    def install_version_table(self):
        """
        Create the table holding the version marker, if it doesn't exist.
        It has at most one row.
        """
        with self.transaction():
            self.connection.execute(
                sql.SQL(
                    """
                    create table if not exists {} (
                        version bigint not null primary key,
                        dirty boolean not null
                    )
                    """
                ).format(self.table_identifier)
            )

    def read_version(self) -> tuple[int, bool]:
        row = self.connection.execute(
            sql.SQL("select version, dirty from {} limit 1").format(self.table_identifier)
        ).fetchone()
        if row is None:
            return NIL_VERSION, False
        return int(row[0]), bool(row[1])

    def set_version(self, version: int, dirty: bool) -> None:
        with self.transaction():
            with self.connection.cursor() as cur:
                cur.execute(sql.SQL("truncate {}").format(self.table_identifier))
                if version >= 0 or (version == NIL_VERSION and dirty):
                    cur.execute(
                        sql.SQL("insert into {} (version, dirty) values (%s, %s)").format(
                            self.table_identifier
                        ),
                        (version, dirty),
                    )

    def run(self, statements: Iterable[str]) -> None:
        with self.connection.cursor() as cur:
            for cmd in statements:
                click.echo(f"- {one_line(cmd)} ", nl=False)
                cur.execute(cmd.encode("utf-8"))
                click.echo("[ ok ]")

    @property
    def lock_id(self) -> int:
        database, schema = self.connection.execute(
            "select current_database(), current_schema()"
        ).fetchone()
        return advisory_lock_id(database, schema or "", self.table)

    @contextmanager
    def lock(self) -> Generator[None, None, None]:
        lock_id = self.lock_id
        self.connection.execute("select pg_advisory_lock(%s)", (lock_id,))
        try:
            yield
        finally:
            self.connection.execute("select pg_advisory_unlock(%s)", (lock_id,))

    def close(self) -> None:
        self.connection.close()

