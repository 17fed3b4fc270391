from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local
from .formatter import InvoiceFormatter, LanguageFormattings
from .model import InvoiceModel


class InvoiceModelFactory:
    """Builds empty invoice models; the service fills and calculates them."""

    def __init__(self, formattings: LanguageFormattings):
        self._formattings = formattings

    def create_formatter(self, language: str) -> InvoiceFormatter:
        return InvoiceFormatter(self._formattings, language)

    def create_model(self, formatter: InvoiceFormatter, *, now: Optional[datetime] = None) -> InvoiceModel:
        return InvoiceModel(formatter=formatter, invoice_date=now or now_local())
