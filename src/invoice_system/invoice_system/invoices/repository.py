from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..timesheets.model import Timesheet
from .model import Invoice, InvoiceTemplate
from .query import InvoiceQuery


class InvoiceItemRepository(Protocol):
    """Data source of billable items; the service may hold several."""

    def get_invoice_items_for_query(self, query: InvoiceQuery) -> Sequence[Timesheet]:
        raise NotImplementedError

    def set_exported(self, items: Sequence[Timesheet]) -> None:
        raise NotImplementedError


class InvoiceRepository(Protocol):
    def has_invoice(self, invoice_number: str) -> bool:
        raise NotImplementedError

    def count_invoices(self) -> int:
        raise NotImplementedError

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        raise NotImplementedError

    def save_invoice(self, invoice: Invoice) -> Invoice:
        """Insert or update; assigns ``invoice_id`` on insert."""

        raise NotImplementedError

    def delete_invoice(self, invoice: Invoice) -> None:
        raise NotImplementedError


class InvoiceTemplateRepository(Protocol):
    def get_by_id(self, template_id: int) -> Optional[InvoiceTemplate]:
        raise NotImplementedError
