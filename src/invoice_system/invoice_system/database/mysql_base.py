from __future__ import annotations

from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


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


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_decimal(value: Any) -> Optional[Decimal]:
    """Normalize DECIMAL/FLOAT columns; mysql-connector may return float or str."""

    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def in_clause(column: str, values: Sequence[Any]) -> Tuple[str, Tuple[Any, ...]]:
    """Build ``column IN (%s, ...)`` with its parameters."""

    placeholders = ", ".join(["%s"] * len(values))
    return f"{column} IN ({placeholders})", tuple(values)
