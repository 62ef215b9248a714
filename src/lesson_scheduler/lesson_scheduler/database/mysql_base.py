from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import TransientStorageError
from .connection import DatabaseConnection

# Contention errors that mean "try again", not "this request is wrong".
TRANSIENT_ERRNOS = frozenset({errorcode.ER_LOCK_WAIT_TIMEOUT, errorcode.ER_LOCK_DEADLOCK})


def _translate(exc: mysql.connector.Error) -> Exception:
    if getattr(exc, "errno", None) in TRANSIENT_ERRNOS:
        return TransientStorageError(f"Storage contention: {exc}")
    return exc


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
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
def transaction(conn_factory: DatabaseConnection, *, isolation_level: str = "READ COMMITTED") -> Iterator[Any]:
    """One explicit transaction; row locks taken inside are held until commit.

    Lock timeouts and deadlocks surface as ``TransientStorageError``.
    """

    conn = conn_factory.connect()
    try:
        conn.start_transaction(isolation_level=isolation_level)
        cur = conn.cursor(dictionary=True)
        try:
            yield cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        translated = _translate(exc)
        if translated is exc:
            raise
        raise translated from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_decimal(value: Any) -> Optional[Decimal]:
    """Normalize DECIMAL columns (connector may hand back Decimal, float or str)."""

    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
