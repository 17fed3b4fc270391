from __future__ import annotations

from .base import GroupedInvoiceCalculator


class UserInvoiceCalculator(GroupedInvoiceCalculator):
    """One line per user."""

    def get_id(self) -> str:
        return "user"

    def group_key(self, entry):
        return entry.user

    def group_description(self, entries):
        return entries[0].user
