from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .connection import DatabaseConnection

NAMED_LOCK_TIMEOUT_SECONDS = 10


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary, buffered=True)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def named_lock(conn_factory: DatabaseConnection, name: str, *, timeout: int = NAMED_LOCK_TIMEOUT_SECONDS) -> Iterator[None]:
    """Serialize writers on a logical key that has no single row to lock (MySQL GET_LOCK).

    The lock is held on its own connection for the duration of the ``with`` block.
    """

    conn = conn_factory.connect()
    cur = conn.cursor(buffered=True)
    try:
        cur.execute("SELECT GET_LOCK(%s, %s)", (name, int(timeout)))
        row = cur.fetchone()
        if not row or row[0] != 1:
            raise TimeoutError(f"Could not acquire lock {name!r}")
        try:
            yield
        finally:
            cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
            cur.fetchone()
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def placeholders(values: Sequence[Any]) -> str:
    """``%s,%s,...`` for an IN clause."""
    return ",".join(["%s"] * len(values))
