from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...common.datetime_utils import now_local
from ..model import InvoiceTemplate
from .base import InvoiceNumberGenerator


class DateNumberGenerator(InvoiceNumberGenerator):
    """``yymmdd``, with ``-1``, ``-2``, ... appended while the number is taken."""

    def get_id(self) -> str:
        return "date"

    def get_invoice_number(self, template: InvoiceTemplate, *, now: Optional[datetime] = None) -> str:
        base = (now or now_local()).strftime("%y%m%d")
        return self._first_free(lambda attempt: base if attempt == 0 else f"{base}-{attempt}")
