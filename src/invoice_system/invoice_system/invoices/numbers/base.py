from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Optional

from ...core.constants import MAX_NUMBER_ATTEMPTS
from ...core.exceptions import DomainError
from ..model import InvoiceTemplate
from ..repository import InvoiceRepository


class InvoiceNumberGenerator(ABC):
    """Number generator interface (Strategy Pattern for invoice numbers)."""

    def __init__(self, invoices: InvoiceRepository):
        self._invoices = invoices

    @abstractmethod
    def get_id(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get_invoice_number(self, template: InvoiceTemplate, *, now: Optional[datetime] = None) -> str:
        raise NotImplementedError

    def _first_free(self, candidate: Callable[[int], str]) -> str:
        """Return the first ``candidate(n)`` not used by an existing invoice."""

        for attempt in range(MAX_NUMBER_ATTEMPTS):
            number = candidate(attempt)
            if not self._invoices.has_invoice(number):
                return number
        raise DomainError(f"Could not find a free invoice number after {MAX_NUMBER_ATTEMPTS} attempts")
