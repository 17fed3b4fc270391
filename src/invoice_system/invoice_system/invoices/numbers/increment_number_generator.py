from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..model import InvoiceTemplate
from .base import InvoiceNumberGenerator


class IncrementingNumberGenerator(InvoiceNumberGenerator):
    """Running counter: number of stored invoices plus one."""

    def get_id(self) -> str:
        return "increment"

    def get_invoice_number(self, template: InvoiceTemplate, *, now: Optional[datetime] = None) -> str:
        start = self._invoices.count_invoices() + 1
        return self._first_free(lambda attempt: str(start + attempt))
