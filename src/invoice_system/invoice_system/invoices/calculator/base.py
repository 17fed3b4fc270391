from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from ...timesheets.model import Timesheet
from ..model import CalculationResult, InvoiceItem, InvoiceTemplate

CENT = Decimal("0.01")


def money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def _amount(entry: Timesheet) -> Decimal:
    # Fixed-rate entries are billed per piece, hourly ones per hour.
    if entry.fixed_rate is not None:
        return Decimal(1)
    return money(Decimal(entry.duration or 0) / Decimal(3600))


def _same_or_none(values: Sequence[Optional[Decimal]]) -> Optional[Decimal]:
    unique = set(values)
    return unique.pop() if len(unique) == 1 else None


def merge_timesheets(entries: Sequence[Timesheet], *, description: Optional[str] = None) -> InvoiceItem:
    """Collapse timesheets into one invoice line.

    Durations, amounts and rates are summed; hourly and fixed rates survive
    only when identical across all entries.
    """

    first = entries[0]
    ends = [e.end for e in entries if e.end is not None]
    if description is None:
        description = next((e.description for e in entries if e.description), None)

    return InvoiceItem(
        description=description,
        amount=sum((_amount(e) for e in entries), Decimal(0)),
        rate=money(sum((e.rate for e in entries), Decimal(0))),
        duration=sum(int(e.duration or 0) for e in entries),
        begin=min(e.begin for e in entries),
        end=max(ends) if ends else None,
        hourly_rate=_same_or_none([e.hourly_rate for e in entries]),
        fixed_rate=_same_or_none([e.fixed_rate for e in entries]),
        user=first.user if len({e.user for e in entries}) == 1 else None,
        activity=first.activity if len({e.activity for e in entries}) == 1 else None,
        project=first.project.name if len({e.project for e in entries}) == 1 else None,
    )


class InvoiceCalculator(ABC):
    """Calculator interface (Strategy Pattern for invoice totals)."""

    @abstractmethod
    def get_id(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def calculate_entries(self, entries: Sequence[Timesheet]) -> List[InvoiceItem]:
        raise NotImplementedError

    def calculate(self, entries: Sequence[Timesheet], template: InvoiceTemplate, *, currency: str) -> CalculationResult:
        items = self.calculate_entries(entries) if entries else []
        subtotal = money(sum((i.rate for i in items), Decimal(0)))
        vat = Decimal(template.vat or 0)
        tax = money(subtotal * vat / Decimal(100))

        return CalculationResult(
            entries=items,
            subtotal=subtotal,
            vat=vat,
            tax=tax,
            total=subtotal + tax,
            time_worked=sum(i.duration for i in items),
            currency=currency,
        )


class GroupedInvoiceCalculator(InvoiceCalculator):
    """Merges timesheets sharing a group key into one line, in first-seen order."""

    @abstractmethod
    def group_key(self, entry: Timesheet):
        raise NotImplementedError

    def group_description(self, entries: Sequence[Timesheet]) -> Optional[str]:
        return None

    def calculate_entries(self, entries: Sequence[Timesheet]) -> List[InvoiceItem]:
        groups: dict = {}
        for entry in entries:
            groups.setdefault(self.group_key(entry), []).append(entry)
        return [merge_timesheets(group, description=self.group_description(group)) for group in groups.values()]
