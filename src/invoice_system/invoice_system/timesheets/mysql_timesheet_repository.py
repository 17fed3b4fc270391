from __future__ import annotations

from typing import Any, Dict, List, Sequence

from ..customers.model import Project
from ..customers.mysql_customer_repository import row_to_customer
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause, to_decimal
from ..invoices.query import InvoiceQuery
from ..invoices.repository import InvoiceItemRepository
from .model import Timesheet


class MySQLTimesheetRepository(InvoiceItemRepository):
    """Timesheets as invoice items, filtered by an :class:`InvoiceQuery`."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_invoice_items_for_query(self, query: InvoiceQuery) -> Sequence[Timesheet]:
        customer_ids = [c.customer_id for c in query.customers if c.customer_id is not None]
        if not customer_ids:
            return []

        where: List[str] = ["t.end_time IS NOT NULL"]
        params: List[Any] = []

        clause, values = in_clause("p.customer_id", customer_ids)
        where.append(clause)
        params.extend(values)

        project_ids = [p.project_id for p in query.projects if p.project_id is not None]
        if project_ids:
            clause, values = in_clause("t.project_id", project_ids)
            where.append(clause)
            params.extend(values)

        if query.activities:
            clause, values = in_clause("t.activity", list(query.activities))
            where.append(clause)
            params.extend(values)

        if query.users:
            clause, values = in_clause("t.username", list(query.users))
            where.append(clause)
            params.extend(values)

        if query.begin is not None:
            where.append("t.begin_time >= %s")
            params.append(query.begin)
        if query.end is not None:
            where.append("t.begin_time <= %s")
            params.append(query.end)

        if query.billable is not None:
            where.append("t.billable = %s")
            params.append(1 if query.billable else 0)
        if query.exported is not None:
            where.append("t.exported = %s")
            params.append(1 if query.exported else 0)

        if query.search_term:
            where.append("t.description LIKE %s")
            params.append(f"%{query.search_term}%")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT t.timesheet_id, t.begin_time, t.end_time, t.duration, t.rate, t.hourly_rate,
                       t.fixed_rate, t.description, t.username, t.activity, t.billable, t.exported,
                       p.project_id, p.name AS project_name,
                       c.customer_id AS c_customer_id, c.name AS c_name, c.company AS c_company,
                       c.address AS c_address, c.vat_id AS c_vat_id, c.currency AS c_currency,
                       c.country AS c_country
                FROM timesheets t
                JOIN projects p ON p.project_id = t.project_id
                JOIN customers c ON c.customer_id = p.customer_id
                WHERE {" AND ".join(where)}
                ORDER BY t.begin_time ASC
                """,
                tuple(params),
            )
            return [self._to_timesheet(r) for r in fetchall(cur)]

    def set_exported(self, items: Sequence[Timesheet]) -> None:
        ids = [t.timesheet_id for t in items if t.timesheet_id is not None]
        if not ids:
            return
        clause, values = in_clause("timesheet_id", ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE timesheets SET exported=1 WHERE {clause}", values)

    @staticmethod
    def _to_timesheet(r: Dict[str, Any]) -> Timesheet:
        project = Project(
            project_id=int(r["project_id"]),
            name=r["project_name"],
            customer=row_to_customer(r, prefix="c_"),
        )
        return Timesheet(
            timesheet_id=int(r["timesheet_id"]),
            begin=r["begin_time"],
            end=r.get("end_time"),
            duration=int(r["duration"]) if r.get("duration") is not None else None,
            rate=to_decimal(r.get("rate")) or to_decimal(0),
            hourly_rate=to_decimal(r.get("hourly_rate")),
            fixed_rate=to_decimal(r.get("fixed_rate")),
            description=r.get("description"),
            user=r.get("username"),
            activity=r.get("activity"),
            project=project,
            billable=bool(r.get("billable", 1)),
            exported=bool(r.get("exported", 0)),
        )
