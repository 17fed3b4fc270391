from __future__ import annotations

from .base import GroupedInvoiceCalculator


class ShortInvoiceCalculator(GroupedInvoiceCalculator):
    """All timesheets merged into a single line."""

    def get_id(self) -> str:
        return "short"

    def group_key(self, entry):
        return None
