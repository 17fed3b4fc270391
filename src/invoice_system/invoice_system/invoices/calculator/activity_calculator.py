from __future__ import annotations

from .base import GroupedInvoiceCalculator


class ActivityInvoiceCalculator(GroupedInvoiceCalculator):
    """One line per activity."""

    def get_id(self) -> str:
        return "activity"

    def group_key(self, entry):
        return entry.activity

    def group_description(self, entries):
        return entries[0].activity
