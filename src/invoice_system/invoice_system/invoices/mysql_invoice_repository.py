from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.enums import InvoiceStatus
from ..customers.mysql_customer_repository import row_to_customer
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, to_decimal
from .model import Invoice, InvoiceTemplate
from .repository import InvoiceRepository, InvoiceTemplateRepository


class MySQLInvoiceRepository(InvoiceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def has_invoice(self, invoice_number: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM invoices WHERE invoice_number=%s LIMIT 1", (invoice_number,))
            return fetchone(cur) is not None

    def count_invoices(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM invoices")
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT i.invoice_id, i.invoice_number, i.created_at, i.total, i.tax, i.vat, i.currency,
                       i.due_days, i.status, i.payment_date, i.invoice_filename, i.comment,
                       c.customer_id AS c_customer_id, c.name AS c_name, c.company AS c_company,
                       c.address AS c_address, c.vat_id AS c_vat_id, c.currency AS c_currency,
                       c.country AS c_country
                FROM invoices i
                JOIN customers c ON c.customer_id = i.customer_id
                WHERE i.invoice_id=%s
                """,
                (int(invoice_id),),
            )
            r = fetchone(cur)
            return self._to_invoice(r) if r else None

    def save_invoice(self, invoice: Invoice) -> Invoice:
        values = (
            invoice.invoice_number,
            invoice.customer.customer_id,
            invoice.created_at,
            invoice.total,
            invoice.tax,
            invoice.vat,
            invoice.currency,
            int(invoice.due_days),
            invoice.status.value,
            invoice.payment_date,
            invoice.invoice_filename,
            invoice.comment,
        )
        with db_cursor(self._conn_factory) as (_, cur):
            if invoice.invoice_id is None:
                cur.execute(
                    """
                    INSERT INTO invoices (invoice_number, customer_id, created_at, total, tax, vat, currency,
                                          due_days, status, payment_date, invoice_filename, comment)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    values,
                )
                invoice.invoice_id = int(cur.lastrowid)
            else:
                cur.execute(
                    """
                    UPDATE invoices
                    SET invoice_number=%s, customer_id=%s, created_at=%s, total=%s, tax=%s, vat=%s, currency=%s,
                        due_days=%s, status=%s, payment_date=%s, invoice_filename=%s, comment=%s
                    WHERE invoice_id=%s
                    """,
                    values + (invoice.invoice_id,),
                )
        return invoice

    def delete_invoice(self, invoice: Invoice) -> None:
        if invoice.invoice_id is None:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM invoices WHERE invoice_id=%s", (invoice.invoice_id,))

    @staticmethod
    def _to_invoice(r: Dict[str, Any]) -> Invoice:
        return Invoice(
            invoice_id=int(r["invoice_id"]),
            invoice_number=r["invoice_number"],
            customer=row_to_customer(r, prefix="c_"),
            created_at=r["created_at"],
            total=to_decimal(r["total"]),
            tax=to_decimal(r["tax"]),
            vat=to_decimal(r["vat"]),
            currency=r["currency"],
            due_days=int(r["due_days"]),
            status=InvoiceStatus(r["status"]),
            payment_date=r.get("payment_date"),
            invoice_filename=r.get("invoice_filename"),
            comment=r.get("comment"),
        )


class MySQLInvoiceTemplateRepository(InvoiceTemplateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, template_id: int) -> Optional[InvoiceTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT template_id, name, title, company, address, vat_id, contact, payment_terms,
                       payment_details, due_days, vat, calculator, number_generator, renderer, language
                FROM invoice_templates
                WHERE template_id=%s
                """,
                (int(template_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return InvoiceTemplate(
                template_id=int(r["template_id"]),
                name=r["name"],
                title=r["title"],
                company=r.get("company"),
                address=r.get("address"),
                vat_id=r.get("vat_id"),
                contact=r.get("contact"),
                payment_terms=r.get("payment_terms"),
                payment_details=r.get("payment_details"),
                due_days=int(r["due_days"]),
                vat=to_decimal(r["vat"]),
                calculator=r["calculator"],
                number_generator=r["number_generator"],
                renderer=r["renderer"],
                language=r.get("language"),
            )
