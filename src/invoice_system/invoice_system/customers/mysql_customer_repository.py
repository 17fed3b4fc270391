from __future__ import annotations

from typing import Any, Dict, Sequence

from ..core.constants import DEFAULT_CURRENCY
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Customer
from .repository import CustomerRepository

_COLUMNS = "customer_id, name, company, address, vat_id, currency, country"


def row_to_customer(r: Dict[str, Any], *, prefix: str = "") -> Customer:
    return Customer(
        customer_id=int(r[f"{prefix}customer_id"]),
        name=r[f"{prefix}name"],
        company=r.get(f"{prefix}company"),
        address=r.get(f"{prefix}address"),
        vat_id=r.get(f"{prefix}vat_id"),
        currency=r.get(f"{prefix}currency") or DEFAULT_CURRENCY,
        country=r.get(f"{prefix}country"),
    )


class MySQLCustomerRepository(CustomerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_ids(self, customer_ids: Sequence[int]) -> Sequence[Customer]:
        ids = [int(i) for i in customer_ids]
        if not ids:
            return []
        placeholders = ", ".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM customers WHERE customer_id IN ({placeholders}) ORDER BY name",
                tuple(ids),
            )
            return [row_to_customer(r) for r in fetchall(cur)]
