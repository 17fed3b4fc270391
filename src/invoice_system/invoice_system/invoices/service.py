from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Union

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_DUE_DAYS
from ..core.enums import InvoiceStatus
from ..core.exceptions import DomainError, InvoiceModelError, NotFoundError, ValidationError
from ..customers.model import Customer
from ..timesheets.model import Timesheet
from .calculator.base import InvoiceCalculator
from .documents import InvoiceDocumentRepository
from .formatter import LanguageFormattings
from .model import Invoice, InvoiceDocument, InvoiceModel, RenderedInvoice
from .model_factory import InvoiceModelFactory
from .numbers.base import InvoiceNumberGenerator
from .query import InvoiceQuery, resolve_date_range
from .renderers.base import InvoiceRenderer
from .repository import InvoiceItemRepository, InvoiceRepository
from .storage import InvoiceFileStorage

logger = logging.getLogger(__name__)


class InvoiceService:
    """Creates invoice models and invoices from timesheet data.

    Calculators, number generators and renderers are registered by the name
    they report through ``get_id()``; registering a name again replaces the
    previous strategy. Registries are filled once while the container is
    built and only read afterwards.
    """

    def __init__(
        self,
        documents: InvoiceDocumentRepository,
        file_storage: InvoiceFileStorage,
        invoices: InvoiceRepository,
        formattings: LanguageFormattings,
        model_factory: InvoiceModelFactory,
    ):
        self._documents = documents
        self._file_storage = file_storage
        self._invoices = invoices
        self._formattings = formattings
        self._model_factory = model_factory

        self._calculators: Dict[str, InvoiceCalculator] = {}
        self._number_generators: Dict[str, InvoiceNumberGenerator] = {}
        self._renderers: Dict[str, InvoiceRenderer] = {}
        self._item_repositories: List[InvoiceItemRepository] = []

    # Registries

    def add_calculator(self, calculator: InvoiceCalculator) -> None:
        self._calculators[calculator.get_id()] = calculator

    def add_number_generator(self, generator: InvoiceNumberGenerator) -> None:
        self._number_generators[generator.get_id()] = generator

    def add_renderer(self, renderer: InvoiceRenderer) -> None:
        self._renderers[renderer.get_id()] = renderer

    def add_invoice_item_repository(self, repository: InvoiceItemRepository) -> None:
        self._item_repositories.append(repository)

    def get_calculators(self) -> List[InvoiceCalculator]:
        return list(self._calculators.values())

    def get_number_generators(self) -> List[InvoiceNumberGenerator]:
        return list(self._number_generators.values())

    def get_renderers(self) -> List[InvoiceRenderer]:
        return list(self._renderers.values())

    def get_documents(self) -> List[InvoiceDocument]:
        return self._documents.get_documents()

    def get_calculator_by_name(self, name: str) -> Optional[InvoiceCalculator]:
        return self._calculators.get(name)

    def get_number_generator_by_name(self, name: str) -> Optional[InvoiceNumberGenerator]:
        return self._number_generators.get(name)

    def get_renderer_by_name(self, name: str) -> Optional[InvoiceRenderer]:
        return self._renderers.get(name)

    def get_document_by_name(self, name: str) -> Optional[InvoiceDocument]:
        return self._documents.get_document_by_name(name)

    # Models

    def find_invoice_items(self, query: InvoiceQuery) -> List[Timesheet]:
        if not query.customers:
            return []

        items: List[Timesheet] = []
        for repository in self._item_repositories:
            items.extend(repository.get_invoice_items_for_query(query))
        return items

    def create_model(self, query: InvoiceQuery, *, now: Optional[datetime] = None) -> InvoiceModel:
        template = query.template
        if template is None:
            raise InvoiceModelError("Cannot create invoice model without template")

        if template.language is None:
            template.language = self._formattings.get_default_language()
            logger.warning(
                "Invoice template %r has no language, using default %r", template.name, template.language
            )

        generator = self.get_number_generator_by_name(template.number_generator)
        if generator is None:
            raise InvoiceModelError(f"Unknown number generator: {template.number_generator}")

        calculator = self.get_calculator_by_name(template.calculator)
        if calculator is None:
            raise InvoiceModelError(f"Unknown invoice calculator: {template.calculator}")

        formatter = self._model_factory.create_formatter(template.language)
        model = self._model_factory.create_model(formatter, now=now)
        model.query = query
        model.template = template
        model.customer = query.customer
        model.calculator = calculator
        model.number_generator = generator
        model.add_entries(self.find_invoice_items(query))

        model.calculate()
        model.generate_invoice_number()
        return model

    def create_models(self, query: InvoiceQuery, *, now: Optional[datetime] = None) -> List[InvoiceModel]:
        """One model per customer of ``query``.

        Unset begin/end of ``query`` are replaced by the period actually
        covered by the matching items, so documents show real dates.
        """

        query.set_range(resolve_date_range(query, self.find_invoice_items(query)))
        return [self.create_model(query.for_customer(customer), now=now) for customer in query.customers]

    # Invoices

    def render_invoice(self, document: InvoiceDocument, model: InvoiceModel) -> RenderedInvoice:
        for renderer in self._renderers.values():
            if renderer.supports(document):
                return renderer.render(document, model)
        raise DomainError(f"No renderer supports invoice document {document.filename}")

    def create_invoice_from_model(self, document: InvoiceDocument, model: InvoiceModel) -> Invoice:
        # Re-generated here so invoices created in one batch do not share a number.
        model.generate_invoice_number()
        calculation = model.calculation or model.calculate()

        rendered = self.render_invoice(document, model)
        filename = self._file_storage.save(rendered)

        try:
            invoice = self._invoices.save_invoice(
                Invoice(
                    invoice_number=model.invoice_number or "",
                    customer=model.customer or Customer(),
                    created_at=model.invoice_date,
                    total=calculation.total,
                    tax=calculation.tax,
                    vat=calculation.vat,
                    currency=calculation.currency,
                    due_days=model.template.due_days if model.template else DEFAULT_DUE_DAYS,
                    invoice_filename=filename,
                )
            )
        except Exception:
            logger.exception("Saving invoice %s failed, removing %s", model.invoice_number, filename)
            self._file_storage.delete(filename)
            raise
        logger.info("Created invoice %s (%s)", invoice.invoice_number, filename)

        if model.query is not None and model.query.mark_as_exported:
            self._mark_exported(model.entries)
        return invoice

    def create_invoices(self, query: InvoiceQuery, *, now: Optional[datetime] = None) -> List[Invoice]:
        invoices: List[Invoice] = []
        for model in self.create_models(query, now=now):
            if not model.entries:
                logger.info("No invoice items for customer %r, skipping", model.customer.name if model.customer else None)
                continue

            document = self.get_document_by_name(model.template.renderer)
            if document is None:
                raise NotFoundError(f"Unknown invoice document: {model.template.renderer}")
            invoices.append(self.create_invoice_from_model(document, model))
        return invoices

    def change_invoice_status(self, invoice: Invoice, status: Union[str, InvoiceStatus]) -> Invoice:
        try:
            new_status = InvoiceStatus(status)
        except ValueError:
            raise ValidationError("Unknown invoice status") from None

        invoice.status = new_status
        if new_status == InvoiceStatus.PAID and invoice.payment_date is None:
            invoice.payment_date = now_local().date()

        self._invoices.save_invoice(invoice)
        logger.info("Invoice %s changed status to %s", invoice.invoice_number, new_status.value)
        return invoice

    def delete_invoice(self, invoice: Invoice) -> None:
        if invoice.invoice_filename:
            self._file_storage.delete(invoice.invoice_filename)
        self._invoices.delete_invoice(invoice)

    def _mark_exported(self, entries: Sequence[Timesheet]) -> None:
        for repository in self._item_repositories:
            repository.set_exported(entries)
