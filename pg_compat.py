"""PostgreSQL compatibility layer — wraps psycopg2 to match the sqlite3 API.

The stores are written against sqlite3. When DATABASE is a postgresql:// URL
the connection returned by ``connect_pg`` translates:
  - ? placeholders → %s
  - INSERT OR IGNORE → INSERT ... ON CONFLICT DO NOTHING
  - INTEGER PRIMARY KEY AUTOINCREMENT → SERIAL PRIMARY KEY
  - executescript() → split and execute
  - cursor.lastrowid → RETURNING id
and raises PersistenceError for any psycopg2 failure.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from errors import PersistenceError

logger = logging.getLogger(__name__)

_OR_IGNORE = re.compile(r"INSERT\s+OR\s+IGNORE\s+INTO", re.IGNORECASE)
_AUTOINCREMENT = re.compile(r"(\w+)\s+INTEGER\s+PRIMARY\s+KEY\s+AUTOINCREMENT", re.IGNORECASE)
_PRAGMA = re.compile(r"PRAGMA\s+\w+\s*=\s*\w+\s*;?", re.IGNORECASE)


class PgRow:
    """Dict-like row that mimics sqlite3.Row."""

    def __init__(self, columns: list[str], values: tuple):
        self._data = dict(zip(columns, values))

    def __getitem__(self, key: str | int) -> Any:
        if isinstance(key, int):
            return list(self._data.values())[key]
        return self._data[key]

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def keys(self) -> list[str]:
        return list(self._data.keys())

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def __repr__(self) -> str:
        return f"PgRow({self._data})"


def _translate_sql(sql: str) -> str:
    """Translate a SQLite statement to PostgreSQL."""
    translated = sql.replace("?", "%s")
    if _OR_IGNORE.search(translated):
        translated = _OR_IGNORE.sub("INSERT INTO", translated)
        if "ON CONFLICT" not in translated.upper():
            translated = translated.rstrip().rstrip(";") + " ON CONFLICT DO NOTHING"
    return translated


def _translate_schema(sql: str) -> str:
    """Translate SQLite schema DDL to PostgreSQL DDL."""
    translated = _AUTOINCREMENT.sub(r"\1 SERIAL PRIMARY KEY", sql)
    return _PRAGMA.sub("", translated)


def _psycopg2():
    try:
        import psycopg2
    except ImportError:
        raise ImportError(
            "psycopg2 is required for PostgreSQL support. "
            "Install it with: pip install 'lensquest[postgres]'"
        )
    return psycopg2


class PgCursorWrapper:
    """Wraps a psycopg2 cursor to match sqlite3.Cursor interface."""

    def __init__(self, cursor):
        self._cursor = cursor
        self._last_id: int | None = None

    @property
    def lastrowid(self) -> int | None:
        return self._last_id

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount

    def _columns(self) -> list[str]:
        return [desc[0] for desc in self._cursor.description or ()]

    def execute(self, sql: str, params: tuple = ()) -> PgCursorWrapper:
        translated = _translate_sql(sql)
        self._last_id = None

        upper = translated.strip().upper()
        if upper.startswith("INSERT") and "RETURNING" not in upper:
            self._cursor.execute(translated + " RETURNING id", params)
            row = self._cursor.fetchone()
            self._last_id = row[0] if row else None
            return self

        self._cursor.execute(translated, params)
        return self

    def fetchone(self) -> PgRow | None:
        row = self._cursor.fetchone()
        if row is None:
            return None
        return PgRow(self._columns(), row)

    def fetchall(self) -> list[PgRow]:
        if not self._cursor.description:
            return []
        columns = self._columns()
        return [PgRow(columns, row) for row in self._cursor.fetchall()]

    def close(self) -> None:
        self._cursor.close()


class PgConnectionWrapper:
    """Wraps a psycopg2 connection to match sqlite3.Connection interface."""

    def __init__(self, conn, driver):
        self._conn = conn
        self._conn.autocommit = False
        self._driver = driver

    def execute(self, sql: str, params: tuple = ()) -> PgCursorWrapper:
        cursor = PgCursorWrapper(self._conn.cursor())
        try:
            cursor.execute(sql, params)
        except self._driver.Error as exc:
            self._conn.rollback()
            logger.error("PostgreSQL error: %s", exc)
            raise PersistenceError(str(exc)) from exc
        return cursor

    def executescript(self, sql: str) -> None:
        """Execute multiple DDL statements, skipping ones already applied."""
        statements = [s.strip() for s in _translate_schema(sql).split(";") if s.strip()]
        cursor = self._conn.cursor()
        for stmt in statements:
            try:
                cursor.execute(stmt)
                self._conn.commit()
            except self._driver.Error as exc:
                if "already exists" not in str(exc).lower():
                    self._conn.rollback()
                    raise PersistenceError(str(exc)) from exc
                self._conn.rollback()
                logger.debug("Skipping schema statement: %s", exc)
        cursor.close()

    def commit(self) -> None:
        try:
            self._conn.commit()
        except self._driver.Error as exc:
            raise PersistenceError(str(exc)) from exc

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()


def connect_pg(database_url: str) -> PgConnectionWrapper:
    """Create a PostgreSQL connection with sqlite3-compatible interface."""
    driver = _psycopg2()
    try:
        conn = driver.connect(database_url)
    except driver.Error as exc:
        raise PersistenceError(f"Could not connect to PostgreSQL: {exc}") from exc
    return PgConnectionWrapper(conn, driver)


def is_postgres_url(url: str) -> bool:
    """Check if a database URL is a PostgreSQL URL."""
    return url.startswith("postgresql://") or url.startswith("postgres://")
