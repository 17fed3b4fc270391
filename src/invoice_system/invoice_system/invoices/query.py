from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, Sequence

from ..common.datetime_utils import end_of_day, start_of_day
from ..core.exceptions import ValidationError
from ..customers.model import Customer, Project
from ..timesheets.model import Timesheet

if TYPE_CHECKING:
    from .model import InvoiceTemplate


@dataclass(frozen=True)
class DateRange:
    begin: Optional[datetime]
    end: Optional[datetime]


def _is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


def _check_comparable(values: Sequence[datetime]) -> None:
    if len({_is_aware(v) for v in values}) > 1:
        raise ValidationError("Cannot mix timestamps with and without timezone")


def _check_range(begin: Optional[datetime], end: Optional[datetime]) -> None:
    if begin is None or end is None:
        return
    _check_comparable([begin, end])
    if begin > end:
        raise ValidationError("Begin of the invoice period must not be after its end")


@dataclass
class InvoiceQuery:
    """Filter for invoice items plus the template used to bill them.

    ``exported=None`` and ``billable=None`` mean "do not filter".
    """

    customers: List[Customer] = field(default_factory=list)
    template: Optional["InvoiceTemplate"] = None
    begin: Optional[datetime] = None
    end: Optional[datetime] = None
    projects: List[Project] = field(default_factory=list)
    activities: List[str] = field(default_factory=list)
    users: List[str] = field(default_factory=list)
    exported: Optional[bool] = False
    billable: Optional[bool] = True
    mark_as_exported: bool = False
    search_term: Optional[str] = None

    def __post_init__(self) -> None:
        _check_range(self.begin, self.end)

    @property
    def customer(self) -> Optional[Customer]:
        return self.customers[0] if self.customers else None

    def set_range(self, date_range: DateRange) -> None:
        _check_range(date_range.begin, date_range.end)
        self.begin = date_range.begin
        self.end = date_range.end

    def for_customer(self, customer: Customer) -> "InvoiceQuery":
        """Independent copy of this query restricted to one customer."""
        return replace(
            self,
            customers=[customer],
            projects=list(self.projects),
            activities=list(self.activities),
            users=list(self.users),
        )


def resolve_date_range(query: InvoiceQuery, items: Sequence[Timesheet]) -> DateRange:
    """Fill the unset bounds of ``query`` from the items it matches.

    An unset begin becomes the earliest item begin floored to 00:00:00, an
    unset end the latest item end ceiled to 23:59:59, both in the item's own
    timezone. Bounds that are already set are returned unchanged.
    """

    begin, end = query.begin, query.end
    begins = [i.begin for i in items if i.begin is not None]
    ends = [i.end for i in items if i.end is not None]
    _check_comparable(begins + ends)

    if begin is None and begins:
        begin = start_of_day(min(begins))

    if end is None and ends:
        end = end_of_day(max(ends))

    return DateRange(begin=begin, end=end)
