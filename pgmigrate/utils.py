from datetime import datetime, UTC
from typing import Optional
from urllib.parse import unquote, urlsplit, urlunsplit
import re
import zlib

import sqlparse


TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
ADVISORY_LOCK_SALT = 1486364155
DEFAULT_MIGRATIONS_TABLE = "schema_migrations"

multiple_spaces = re.compile(r"\s+", re.MULTILINE)


def sanitize_name(name: str) -> str:
    return name.strip().lower().replace(" ", "_").replace("-", "_")


def timestamp_version(now: Optional[datetime] = None) -> str:
    return (now or datetime.now(UTC)).astimezone(UTC).strftime(TIMESTAMP_FORMAT)


def sequence_version(number: int, digits: int = 6) -> str:
    version = str(number).zfill(digits)
    if len(version) > digits:
        raise ValueError(f"Next sequence number {version} has more than {digits} digits")
    return version


def split_sql(script: str) -> list[str]:
    """
    Split a script into statements.
    Whitespace-only chunks and chunks consisting of comments only are dropped.
    """
    statements = []
    for cmd in sqlparse.split(script):
        if not cmd or cmd.isspace():
            continue
        if not sqlparse.format(cmd, strip_comments=True).strip():
            continue
        statements.append(cmd)
    return statements


def one_line(cmd: str) -> str:
    return multiple_spaces.sub(" ", cmd).strip()


def advisory_lock_id(database: str, *names: str) -> int:
    """
    Lock id shared with other migration tools using the same scheme:
    crc32 over the additional names and the database name, joined by NUL
    and multiplied by a fixed salt within 32 bits.
    """
    key = "\x00".join([*names, database]).encode("utf-8")
    return (zlib.crc32(key) * ADVISORY_LOCK_SALT) & 0xFFFFFFFF


def pop_migrations_table(dsn: str) -> tuple[str, str]:
    """
    Remove the `x-migrations-table` query parameter from a URL-style DSN.
    Returns the cleaned DSN and the table name.
    """
    parts = urlsplit(dsn)
    if parts.scheme not in ("postgres", "postgresql") or not parts.query:
        return dsn, DEFAULT_MIGRATIONS_TABLE

    table = DEFAULT_MIGRATIONS_TABLE
    segments = parts.query.split("&")
    kept = []
    # Other parameters are passed on untouched, libpq decodes them itself.
    for segment in segments:
        key, _, value = segment.partition("=")
        if unquote(key) == "x-migrations-table":
            table = unquote(value) or DEFAULT_MIGRATIONS_TABLE
        else:
            kept.append(segment)
    if len(kept) == len(segments):
        return dsn, table
    return urlunsplit(parts._replace(query="&".join(kept))), table
