from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..customers.model import Customer, Project


@dataclass(frozen=True)
class Timesheet:
    """Domain entity: a billable time record, the raw input of an invoice.

    ``duration`` is in seconds; when it is not given it is derived from
    ``end - begin`` (0 while the record is still running).
    """

    begin: datetime
    end: Optional[datetime] = None
    project: Project = Project()
    timesheet_id: Optional[int] = None
    duration: Optional[int] = None
    rate: Decimal = Decimal("0")
    hourly_rate: Optional[Decimal] = None
    fixed_rate: Optional[Decimal] = None
    description: Optional[str] = None
    user: Optional[str] = None
    activity: Optional[str] = None
    billable: bool = True
    exported: bool = False

    def __post_init__(self) -> None:
        if self.duration is None:
            seconds = int((self.end - self.begin).total_seconds()) if self.end else 0
            object.__setattr__(self, "duration", max(seconds, 0))

    @property
    def customer(self) -> Customer:
        return self.project.customer
