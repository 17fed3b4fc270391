from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_CURRENCY


@dataclass(frozen=True)
class Customer:
    """Domain entity: the party an invoice is addressed to."""

    customer_id: Optional[int] = None
    name: str = ""
    company: Optional[str] = None
    address: Optional[str] = None
    vat_id: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    country: Optional[str] = None


@dataclass(frozen=True)
class Project:
    """Domain entity: a project always belongs to one customer."""

    project_id: Optional[int] = None
    name: str = ""
    customer: Customer = Customer()
