from __future__ import annotations

from typing import List, Sequence

from ...timesheets.model import Timesheet
from ..model import InvoiceItem
from .base import InvoiceCalculator, merge_timesheets


class DefaultCalculator(InvoiceCalculator):
    """One invoice line per timesheet."""

    def get_id(self) -> str:
        return "default"

    def calculate_entries(self, entries: Sequence[Timesheet]) -> List[InvoiceItem]:
        return [merge_timesheets([entry]) for entry in entries]
