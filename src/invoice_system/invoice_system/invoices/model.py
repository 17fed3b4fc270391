from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..core.constants import (
    DEFAULT_CALCULATOR,
    DEFAULT_CURRENCY,
    DEFAULT_DOCUMENT,
    DEFAULT_DUE_DAYS,
    DEFAULT_NUMBER_GENERATOR,
)
from ..core.enums import InvoiceStatus
from ..core.exceptions import InvoiceModelError
from ..customers.model import Customer
from ..timesheets.model import Timesheet

if TYPE_CHECKING:
    from .calculator.base import InvoiceCalculator
    from .formatter import InvoiceFormatter
    from .numbers.base import InvoiceNumberGenerator
    from .query import InvoiceQuery


@dataclass
class InvoiceTemplate:
    """Presentation settings and the strategy names used for one invoice run.

    ``renderer`` is the name of the invoice document to render with.
    """

    template_id: Optional[int] = None
    name: str = ""
    title: str = ""
    company: Optional[str] = None
    address: Optional[str] = None
    vat_id: Optional[str] = None
    contact: Optional[str] = None
    payment_terms: Optional[str] = None
    payment_details: Optional[str] = None
    due_days: int = DEFAULT_DUE_DAYS
    vat: Decimal = Decimal("0")
    calculator: str = DEFAULT_CALCULATOR
    number_generator: str = DEFAULT_NUMBER_GENERATOR
    renderer: str = DEFAULT_DOCUMENT
    language: Optional[str] = None


@dataclass
class Invoice:
    """Persisted result of rendering an invoice model."""

    invoice_number: str
    customer: Customer
    created_at: datetime
    total: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    vat: Decimal = Decimal("0")
    currency: str = DEFAULT_CURRENCY
    due_days: int = DEFAULT_DUE_DAYS
    status: InvoiceStatus = InvoiceStatus.NEW
    invoice_id: Optional[int] = None
    payment_date: Optional[date] = None
    invoice_filename: Optional[str] = None
    comment: Optional[str] = None

    @property
    def due_date(self) -> datetime:
        return self.created_at + timedelta(days=self.due_days)


@dataclass(frozen=True)
class InvoiceDocument:
    """A template file discovered in one of the document directories."""

    path: Path

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def name(self) -> str:
        return self.filename.split(".", 1)[0]

    @property
    def extension(self) -> str:
        parts = self.filename.split(".", 1)
        return "." + parts[1] if len(parts) > 1 else ""


@dataclass(frozen=True)
class InvoiceItem:
    """One calculated invoice line, built from one or more timesheets."""

    description: Optional[str]
    amount: Decimal
    rate: Decimal
    duration: int
    begin: datetime
    end: Optional[datetime] = None
    hourly_rate: Optional[Decimal] = None
    fixed_rate: Optional[Decimal] = None
    user: Optional[str] = None
    activity: Optional[str] = None
    project: Optional[str] = None


@dataclass(frozen=True)
class CalculationResult:
    entries: List[InvoiceItem]
    subtotal: Decimal
    vat: Decimal
    tax: Decimal
    total: Decimal
    time_worked: int
    currency: str


@dataclass(frozen=True)
class RenderedInvoice:
    content: bytes
    filename: str
    content_type: str


@dataclass
class InvoiceModel:
    """Per-customer assembly consumed by the renderers. Never persisted."""

    formatter: "InvoiceFormatter"
    invoice_date: datetime
    template: Optional[InvoiceTemplate] = None
    query: Optional["InvoiceQuery"] = None
    customer: Optional[Customer] = None
    entries: List[Timesheet] = field(default_factory=list)
    calculator: Optional["InvoiceCalculator"] = None
    number_generator: Optional["InvoiceNumberGenerator"] = None
    calculation: Optional[CalculationResult] = None
    invoice_number: Optional[str] = None

    def add_entries(self, entries: List[Timesheet]) -> None:
        self.entries.extend(entries)

    @property
    def currency(self) -> str:
        return self.customer.currency if self.customer else DEFAULT_CURRENCY

    @property
    def due_date(self) -> datetime:
        due_days = self.template.due_days if self.template else DEFAULT_DUE_DAYS
        return self.invoice_date + timedelta(days=due_days)

    def calculate(self) -> CalculationResult:
        if self.calculator is None or self.template is None:
            raise InvoiceModelError("Cannot calculate invoice without calculator and template")
        self.calculation = self.calculator.calculate(self.entries, self.template, currency=self.currency)
        return self.calculation

    def generate_invoice_number(self) -> str:
        if self.number_generator is None or self.template is None:
            raise InvoiceModelError("Cannot generate invoice number without number generator and template")
        self.invoice_number = self.number_generator.get_invoice_number(self.template, now=self.invoice_date)
        return self.invoice_number

    def to_context(self) -> Dict[str, Any]:
        """Flatten the model into plain values for document templates."""

        calc = self.calculation or self.calculate()
        fmt = self.formatter
        template = self.template or InvoiceTemplate()
        customer = self.customer or Customer()
        query_begin = self.query.begin if self.query else None
        query_end = self.query.end if self.query else None

        return {
            "invoice": {
                "number": self.invoice_number or "",
                "date": fmt.format_date(self.invoice_date),
                "due_date": fmt.format_date(self.due_date),
                "language": fmt.language,
                "currency": calc.currency,
                "subtotal": fmt.format_money(calc.subtotal, calc.currency),
                "vat": str(calc.vat),
                "tax": fmt.format_money(calc.tax, calc.currency),
                "total": fmt.format_money(calc.total, calc.currency),
                "duration": fmt.format_duration(calc.time_worked),
                "begin": fmt.format_date(query_begin),
                "end": fmt.format_date(query_end),
            },
            "template": {
                "name": template.name,
                "title": template.title,
                "company": template.company or "",
                "address": template.address or "",
                "vat_id": template.vat_id or "",
                "contact": template.contact or "",
                "payment_terms": template.payment_terms or "",
                "payment_details": template.payment_details or "",
                "due_days": template.due_days,
            },
            "customer": {
                "name": customer.name,
                "company": customer.company or "",
                "address": customer.address or "",
                "vat_id": customer.vat_id or "",
                "country": customer.country or "",
                "currency": customer.currency,
            },
            "entries": [
                {
                    "description": item.description or "",
                    "amount": fmt.format_amount(item.amount),
                    "rate": fmt.format_money(item.rate, calc.currency),
                    "hourly_rate": fmt.format_money(item.hourly_rate, calc.currency) if item.hourly_rate is not None else "",
                    "fixed_rate": fmt.format_money(item.fixed_rate, calc.currency) if item.fixed_rate is not None else "",
                    "date": fmt.format_date(item.begin),
                    "begin": fmt.format_time(item.begin),
                    "end": fmt.format_time(item.end),
                    "duration": fmt.format_duration(item.duration),
                    "user": item.user or "",
                    "activity": item.activity or "",
                    "project": item.project or "",
                }
                for item in calc.entries
            ],
        }
