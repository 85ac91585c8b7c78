"""Thin wrapper around a DB-API connection returning rows in text form."""

from __future__ import annotations

import logging
from typing import Any

log = logging.getLogger(__name__)

Row = tuple[Any, ...]


class QueryError(Exception):
    """Raised when the database rejects an SQL statement."""

    def __init__(self, message: str, sql: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.sql = sql


def _to_text(value: Any) -> str | None:
    """Render a column value the way PostgreSQL's text protocol does."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "t" if value else "f"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class Database:
    """A DB-API connection whose queries return rows of strings."""

    def __init__(self, connection: Any) -> None:
        self.connection = connection

    def execute(self, sql: str) -> list[tuple[str | None, ...]]:
        """Run one statement and return every row, values as text."""
        log.debug("%s", sql)
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql)
            rows = cursor.fetchall() if cursor.description is not None else []
        except Exception as exc:
            log.error("%s", exc)
            rollback = getattr(self.connection, "rollback", None)
            if rollback is not None:
                try:
                    rollback()
                except Exception:  # pragma: no cover - best effort
                    pass
            raise QueryError(str(exc), sql) from exc
        finally:
            close = getattr(cursor, "close", None)
            if close is not None:
                close()
        return [tuple(_to_text(value) for value in row) for row in rows]

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def run_query(db: Database, sql: str) -> list[tuple[str | None, ...]]:
    """Run a statement; raises QueryError on failure."""
    return db.execute(sql)


def single_value(db: Database, sql: str) -> str | None:
    """Return the first column of a query yielding exactly one row.

    Returns None when the query fails or does not return exactly one row.
    """
    try:
        rows = run_query(db, sql)
    except QueryError:
        return None
    if len(rows) != 1 or not rows[0]:
        return None
    return rows[0][0]