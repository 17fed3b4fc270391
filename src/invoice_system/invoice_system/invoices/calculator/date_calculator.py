from __future__ import annotations

from .base import GroupedInvoiceCalculator


class DateInvoiceCalculator(GroupedInvoiceCalculator):
    """One line per calendar day of the timesheet begin."""

    def get_id(self) -> str:
        return "date"

    def group_key(self, entry):
        return entry.begin.date()
