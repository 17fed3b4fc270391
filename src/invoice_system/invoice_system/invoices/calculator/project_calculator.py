from __future__ import annotations

from .base import GroupedInvoiceCalculator


class ProjectInvoiceCalculator(GroupedInvoiceCalculator):
    """One line per project."""

    def get_id(self) -> str:
        return "project"

    def group_key(self, entry):
        return entry.project

    def group_description(self, entries):
        return entries[0].project.name or None
