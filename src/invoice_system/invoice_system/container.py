from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .customers.mysql_customer_repository import MySQLCustomerRepository
from .customers.repository import CustomerRepository
from .database.connection import DBConfig, DatabaseConnection
from .invoices.calculator.activity_calculator import ActivityInvoiceCalculator
from .invoices.calculator.date_calculator import DateInvoiceCalculator
from .invoices.calculator.default_calculator import DefaultCalculator
from .invoices.calculator.project_calculator import ProjectInvoiceCalculator
from .invoices.calculator.short_calculator import ShortInvoiceCalculator
from .invoices.calculator.user_calculator import UserInvoiceCalculator
from .invoices.documents import InvoiceDocumentRepository
from .invoices.formatter import LanguageFormattings
from .invoices.model_factory import InvoiceModelFactory
from .invoices.mysql_invoice_repository import MySQLInvoiceRepository, MySQLInvoiceTemplateRepository
from .invoices.numbers.date_number_generator import DateNumberGenerator
from .invoices.numbers.increment_number_generator import IncrementingNumberGenerator
from .invoices.renderers.csv_renderer import CsvRenderer
from .invoices.renderers.html_renderer import HtmlRenderer
from .invoices.repository import InvoiceItemRepository, InvoiceRepository, InvoiceTemplateRepository
from .invoices.service import InvoiceService
from .invoices.storage import InvoiceFileStorage
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository

PROJECT_ROOT = Path(__file__).resolve().parents[3]


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    customers_repo: CustomerRepository
    templates_repo: InvoiceTemplateRepository
    invoices_repo: InvoiceRepository

    invoice_service: InvoiceService


def build_invoice_service(
    *,
    invoices_repo: InvoiceRepository,
    item_repositories: Sequence[InvoiceItemRepository],
    document_dirs: Sequence[str],
    data_dir: str,
    languages: Mapping[str, Mapping[str, str]],
    default_language: str,
) -> InvoiceService:
    """Create the service and register every known strategy explicitly."""

    formattings = LanguageFormattings(languages, default_language=default_language)
    service = InvoiceService(
        InvoiceDocumentRepository(document_dirs, base_dir=PROJECT_ROOT),
        InvoiceFileStorage(Path(PROJECT_ROOT, data_dir)),
        invoices_repo,
        formattings,
        InvoiceModelFactory(formattings),
    )

    for calculator in (
        DefaultCalculator(),
        ShortInvoiceCalculator(),
        UserInvoiceCalculator(),
        ProjectInvoiceCalculator(),
        ActivityInvoiceCalculator(),
        DateInvoiceCalculator(),
    ):
        service.add_calculator(calculator)

    service.add_number_generator(DateNumberGenerator(invoices_repo))
    service.add_number_generator(IncrementingNumberGenerator(invoices_repo))

    service.add_renderer(HtmlRenderer())
    service.add_renderer(CsvRenderer())

    for repository in item_repositories:
        service.add_invoice_item_repository(repository)

    return service


def build_container(*, db_config: dict, settings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    customers_repo = MySQLCustomerRepository(conn)
    templates_repo = MySQLInvoiceTemplateRepository(conn)
    invoices_repo = MySQLInvoiceRepository(conn)

    invoice_service = build_invoice_service(
        invoices_repo=invoices_repo,
        item_repositories=[MySQLTimesheetRepository(conn)],
        document_dirs=list(getattr(settings, "INVOICE_DOCUMENT_DIRS")),
        data_dir=str(getattr(settings, "INVOICE_DATA_DIR")),
        languages=getattr(settings, "LANGUAGE_FORMATS"),
        default_language=str(getattr(settings, "DEFAULT_LANGUAGE")),
    )

    return Container(
        conn=conn,
        customers_repo=customers_repo,
        templates_repo=templates_repo,
        invoices_repo=invoices_repo,
        invoice_service=invoice_service,
    )
