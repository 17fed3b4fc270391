from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from src.invoice_system.invoice_system.core.enums import InvoiceStatus
from src.invoice_system.invoice_system.core.exceptions import (
    DomainError,
    InvoiceModelError,
    NotFoundError,
    ValidationError,
)
from src.invoice_system.invoice_system.customers.model import Customer, Project
from src.invoice_system.invoice_system.invoices.calculator.default_calculator import DefaultCalculator
from src.invoice_system.invoice_system.invoices.calculator.short_calculator import ShortInvoiceCalculator
from src.invoice_system.invoice_system.invoices.documents import InvoiceDocumentRepository
from src.invoice_system.invoice_system.invoices.formatter import LanguageFormattings
from src.invoice_system.invoice_system.invoices.model import Invoice, InvoiceDocument, InvoiceTemplate
from src.invoice_system.invoice_system.invoices.model_factory import InvoiceModelFactory
from src.invoice_system.invoice_system.invoices.numbers.date_number_generator import DateNumberGenerator
from src.invoice_system.invoice_system.invoices.query import InvoiceQuery
from src.invoice_system.invoice_system.invoices.renderers.html_renderer import HtmlRenderer
from src.invoice_system.invoice_system.invoices.service import InvoiceService
from src.invoice_system.invoice_system.invoices.storage import InvoiceFileStorage
from src.invoice_system.invoice_system.timesheets.model import Timesheet

PROJECT_ROOT = Path(__file__).resolve().parents[2]

LANGUAGES = {
    "en": {
        "date": "%Y.%m.%d",
        "duration": "{hours}:{minutes:02d} h",
        "time": "%H:%M",
    }
}

NOW = datetime(2024, 5, 3, 10, 0, 0)


class InMemoryInvoices:
    def __init__(self, existing=()):
        self.numbers = set(existing)
        self.saved: dict[int, Invoice] = {}
        self.deleted: list[Invoice] = []
        self._id = 0

    def has_invoice(self, invoice_number):
        return invoice_number in self.numbers

    def count_invoices(self):
        return len(self.numbers)

    def get_by_id(self, invoice_id):
        return self.saved.get(invoice_id)

    def save_invoice(self, invoice):
        if invoice.invoice_id is None:
            self._id += 1
            invoice.invoice_id = self._id
        self.saved[invoice.invoice_id] = invoice
        self.numbers.add(invoice.invoice_number)
        return invoice

    def delete_invoice(self, invoice):
        self.saved.pop(invoice.invoice_id, None)
        self.numbers.discard(invoice.invoice_number)
        self.deleted.append(invoice)


class StaticItems:
    """Returns the same items for every query."""

    def __init__(self, items):
        self._items = list(items)
        self.queries: list[InvoiceQuery] = []

    def get_invoice_items_for_query(self, query):
        self.queries.append(query)
        return list(self._items)

    def set_exported(self, items):
        pass


class CustomerItems:
    """Returns only the items of the customers in the query."""

    def __init__(self, items):
        self._items = list(items)
        self.exported: list[Timesheet] = []

    def get_invoice_items_for_query(self, query):
        return [t for t in self._items if t.customer in query.customers]

    def set_exported(self, items):
        self.exported.extend(items)


def make_service(tmp_path, paths=(), invoices=None) -> InvoiceService:
    formattings = LanguageFormattings(LANGUAGES)
    return InvoiceService(
        InvoiceDocumentRepository(list(paths), base_dir=PROJECT_ROOT),
        InvoiceFileStorage(tmp_path / "invoices"),
        invoices if invoices is not None else InMemoryInvoices(),
        formattings,
        InvoiceModelFactory(formattings),
    )


def make_template(**kwargs) -> InvoiceTemplate:
    kwargs.setdefault("number_generator", "date")
    return InvoiceTemplate(name="Default", title="Invoice", **kwargs)


def make_invoice(**kwargs) -> Invoice:
    return Invoice(invoice_number="240503", customer=Customer(name="Acme"), created_at=NOW, **kwargs)


def test_invalid_status_raises_and_leaves_invoice_untouched(tmp_path):
    invoices = InMemoryInvoices()
    svc = make_service(tmp_path, invoices=invoices)
    invoice = make_invoice()

    with pytest.raises(ValidationError, match="Unknown invoice status"):
        svc.change_invoice_status(invoice, "foo")

    assert invoice.status == InvoiceStatus.NEW
    assert invoices.saved == {}


@pytest.mark.parametrize("status", ["new", "pending", "paid", "canceled", InvoiceStatus.PENDING])
def test_known_status_is_applied_and_saved(tmp_path, status):
    invoices = InMemoryInvoices()
    svc = make_service(tmp_path, invoices=invoices)
    invoice = make_invoice(status=InvoiceStatus.PAID if status == "new" else InvoiceStatus.NEW)

    result = svc.change_invoice_status(invoice, status)

    assert result is invoice
    assert invoice.status == status
    assert invoices.saved[invoice.invoice_id] is invoice


def test_paid_status_sets_payment_date_once(tmp_path):
    svc = make_service(tmp_path)
    invoice = make_invoice()

    svc.change_invoice_status(invoice, "paid")
    assert invoice.payment_date is not None

    paid_on = datetime(2020, 1, 1).date()
    invoice.payment_date = paid_on
    svc.change_invoice_status(invoice, "paid")
    assert invoice.payment_date == paid_on


def test_empty_service(tmp_path):
    svc = make_service(tmp_path)

    assert svc.get_calculators() == []
    assert svc.get_renderers() == []
    assert svc.get_number_generators() == []
    assert svc.get_documents() == []

    assert svc.get_calculator_by_name("default") is None
    assert svc.get_document_by_name("default") is None
    assert svc.get_number_generator_by_name("default") is None
    assert svc.get_renderer_by_name("html") is None


def test_with_document_directory(tmp_path):
    svc = make_service(tmp_path, paths=["templates/invoice/renderer/"])

    documents = svc.get_documents()
    assert documents
    assert all(isinstance(d, InvoiceDocument) for d in documents)
    assert isinstance(svc.get_document_by_name("default"), InvoiceDocument)


def test_add_strategies(tmp_path):
    svc = make_service(tmp_path)

    svc.add_calculator(DefaultCalculator())
    svc.add_number_generator(DateNumberGenerator(InMemoryInvoices()))
    svc.add_renderer(HtmlRenderer())

    assert len(svc.get_calculators()) == 1
    assert isinstance(svc.get_calculator_by_name("default"), DefaultCalculator)
    assert len(svc.get_number_generators()) == 1
    assert isinstance(svc.get_number_generator_by_name("date"), DateNumberGenerator)
    assert len(svc.get_renderers()) == 1
    assert isinstance(svc.get_renderer_by_name("html"), HtmlRenderer)


def test_registering_same_name_twice_keeps_last(tmp_path):
    svc = make_service(tmp_path)
    first, second = DefaultCalculator(), DefaultCalculator()

    svc.add_calculator(first)
    svc.add_calculator(second)
    svc.add_number_generator(DateNumberGenerator(InMemoryInvoices()))
    svc.add_number_generator(DateNumberGenerator(InMemoryInvoices()))
    svc.add_renderer(HtmlRenderer())
    svc.add_renderer(HtmlRenderer())

    assert len(svc.get_calculators()) == 1
    assert svc.get_calculator_by_name("default") is second
    assert len(svc.get_number_generators()) == 1
    assert len(svc.get_renderers()) == 1


def test_registries_are_stable_between_calls(tmp_path):
    svc = make_service(tmp_path, paths=["templates/invoice/renderer"])
    svc.add_calculator(DefaultCalculator())
    svc.add_calculator(ShortInvoiceCalculator())

    assert svc.get_calculators() == svc.get_calculators()
    assert svc.get_number_generators() == svc.get_number_generators()
    assert svc.get_renderers() == svc.get_renderers()
    assert svc.get_documents() == svc.get_documents()


def test_create_model_requires_template(tmp_path):
    query = InvoiceQuery(customers=[Customer()], begin=datetime(2024, 1, 1), end=datetime(2024, 1, 31))
    svc = make_service(tmp_path)
    svc.add_calculator(DefaultCalculator())

    with pytest.raises(InvoiceModelError, match="Cannot create invoice model without template"):
        svc.create_model(query)


def test_create_model_sets_fallback_language(tmp_path):
    template = make_template()
    assert template.language is None

    query = InvoiceQuery(customers=[Customer()], template=template)
    svc = make_service(tmp_path)
    svc.add_calculator(DefaultCalculator())
    svc.add_number_generator(DateNumberGenerator(InMemoryInvoices()))

    model = svc.create_model(query, now=NOW)

    assert model.template.language == "en"
    assert template.language == "en"
    assert model.formatter.language == "en"


def test_create_model_uses_template_language(tmp_path):
    template = make_template(language="de")

    query = InvoiceQuery(customers=[Customer()], template=template)
    svc = make_service(tmp_path)
    svc.add_calculator(DefaultCalculator())
    svc.add_number_generator(DateNumberGenerator(InMemoryInvoices()))

    model = svc.create_model(query, now=NOW)

    assert model.template.language == "de"
    assert model.invoice_number == "240503"
    assert model.calculation.total == Decimal("0.00")


def test_create_model_rejects_unknown_strategies(tmp_path):
    svc = make_service(tmp_path)
    svc.add_calculator(DefaultCalculator())

    query = InvoiceQuery(customers=[Customer()], template=make_template(language="en"))
    with pytest.raises(InvoiceModelError, match="Unknown number generator: date"):
        svc.create_model(query)

    svc.add_number_generator(DateNumberGenerator(InMemoryInvoices()))
    query = InvoiceQuery(customers=[Customer()], template=make_template(language="en", calculator="weekly"))
    with pytest.raises(InvoiceModelError, match="Unknown invoice calculator: weekly"):
        svc.create_model(query)


def test_find_invoice_items_without_customer(tmp_path):
    svc = make_service(tmp_path)
    svc.add_invoice_item_repository(StaticItems([Timesheet(begin=NOW, end=NOW)]))

    assert svc.find_invoice_items(InvoiceQuery()) == []


def test_find_invoice_items_without_repositories(tmp_path):
    svc = make_service(tmp_path)

    query = InvoiceQuery(customers=[Customer(), Customer(name="Other")])
    assert svc.find_invoice_items(query) == []


def test_find_invoice_items_concatenates_repositories(tmp_path):
    first = Timesheet(begin=datetime(2024, 1, 1, 8), end=datetime(2024, 1, 1, 9))
    second = Timesheet(begin=datetime(2024, 1, 2, 8), end=datetime(2024, 1, 2, 9))
    svc = make_service(tmp_path)
    svc.add_invoice_item_repository(StaticItems([first]))
    svc.add_invoice_item_repository(StaticItems([second]))

    assert svc.find_invoice_items(InvoiceQuery(customers=[Customer()])) == [first, second]


def test_begin_and_end_date_fallback(tmp_path):
    tz = ZoneInfo("Europe/Vienna")
    customer = Customer(customer_id=1, name="Acme")
    project = Project(project_id=1, name="Website", customer=customer)

    def ts(begin, end):
        return Timesheet(begin=begin.replace(tzinfo=tz), end=end.replace(tzinfo=tz), project=project)

    repo = StaticItems(
        [
            ts(datetime(2011, 1, 27, 12, 12, 12), datetime(2020, 1, 27, 12, 12, 12)),
            ts(datetime(2010, 1, 27, 8, 24, 33), datetime(2019, 1, 27, 12, 12, 12)),
            ts(datetime(2019, 1, 27, 12, 12, 12), datetime(2020, 1, 7, 12, 12, 12)),
            ts(datetime(2020, 1, 27, 10, 12, 12), datetime(2020, 11, 27, 11, 12, 12)),
            ts(datetime(2012, 1, 27, 12, 12, 12), datetime(2018, 1, 27, 12, 12, 12)),
        ]
    )

    query = InvoiceQuery(customers=[Customer(), customer], template=make_template(language="de"))
    assert query.begin is None
    assert query.end is None

    svc = make_service(tmp_path)
    svc.add_calculator(DefaultCalculator())
    svc.add_number_generator(DateNumberGenerator(InMemoryInvoices()))
    svc.add_invoice_item_repository(repo)

    models = svc.create_models(query, now=NOW)

    assert query.begin.strftime("%Y-%m-%dT%H:%M:%S%z") == "2010-01-27T00:00:00+0100"
    assert query.end.strftime("%Y-%m-%dT%H:%M:%S%z") == "2020-11-27T23:59:59+0100"

    assert len(models) == 2
    assert [m.customer for m in models] == [Customer(), customer]
    assert all(m.query is not query for m in models)
    assert all(m.query.begin == query.begin for m in models)
    # per-customer queries only carry their own customer
    assert [q.customers for q in repo.queries[1:]] == [[Customer()], [customer]]


def test_create_models_keeps_explicit_range(tmp_path):
    begin = datetime(2024, 1, 1, 12, 0)
    end = datetime(2024, 1, 31, 12, 0)
    item = Timesheet(begin=datetime(2023, 6, 1, 9), end=datetime(2024, 6, 1, 17))

    query = InvoiceQuery(customers=[Customer()], template=make_template(language="en"), begin=begin, end=end)
    svc = make_service(tmp_path)
    svc.add_calculator(DefaultCalculator())
    svc.add_number_generator(DateNumberGenerator(InMemoryInvoices()))
    svc.add_invoice_item_repository(StaticItems([item]))

    svc.create_models(query, now=NOW)

    assert query.begin == begin
    assert query.end == end


def _billing_fixture(tmp_path, *, mark_as_exported=False):
    acme = Customer(customer_id=1, name="Acme", currency="EUR")
    globex = Customer(customer_id=2, name="Globex", currency="EUR")
    initech = Customer(customer_id=3, name="Initech", currency="EUR")
    items = CustomerItems(
        [
            Timesheet(
                timesheet_id=1,
                begin=datetime(2024, 4, 2, 9),
                end=datetime(2024, 4, 2, 11),
                rate=Decimal("100"),
                hourly_rate=Decimal("50"),
                description="Design",
                project=Project(project_id=1, name="Website", customer=acme),
            ),
            Timesheet(
                timesheet_id=2,
                begin=datetime(2024, 4, 3, 9),
                end=datetime(2024, 4, 3, 10),
                rate=Decimal("50"),
                hourly_rate=Decimal("50"),
                description="Review",
                project=Project(project_id=1, name="Website", customer=acme),
            ),
            Timesheet(
                timesheet_id=3,
                begin=datetime(2024, 4, 4, 9),
                end=datetime(2024, 4, 4, 10),
                rate=Decimal("80"),
                project=Project(project_id=2, name="App", customer=globex),
            ),
        ]
    )

    invoices = InMemoryInvoices()
    svc = make_service(tmp_path, paths=["templates/invoice/renderer"], invoices=invoices)
    svc.add_calculator(DefaultCalculator())
    svc.add_number_generator(DateNumberGenerator(invoices))
    svc.add_renderer(HtmlRenderer())
    svc.add_invoice_item_repository(items)

    query = InvoiceQuery(
        customers=[acme, globex, initech],
        template=make_template(language="en", vat=Decimal("19")),
        mark_as_exported=mark_as_exported,
    )
    return svc, query, invoices, items


def test_create_invoices_renders_stores_and_persists(tmp_path):
    svc, query, invoices, items = _billing_fixture(tmp_path)

    created = svc.create_invoices(query, now=NOW)

    assert [i.customer.name for i in created] == ["Acme", "Globex"]
    assert [i.invoice_number for i in created] == ["240503", "240503-1"]

    acme_invoice = created[0]
    assert acme_invoice.total == Decimal("178.50")
    assert acme_invoice.tax == Decimal("28.50")
    assert acme_invoice.status == InvoiceStatus.NEW
    assert acme_invoice.invoice_id in invoices.saved
    assert (tmp_path / "invoices" / acme_invoice.invoice_filename).is_file()
    assert items.exported == []


def test_create_invoices_marks_entries_exported(tmp_path):
    svc, query, _, items = _billing_fixture(tmp_path, mark_as_exported=True)

    svc.create_invoices(query, now=NOW)

    assert sorted(t.timesheet_id for t in items.exported) == [1, 2, 3]


def test_create_invoices_requires_known_document(tmp_path):
    svc, query, _, _ = _billing_fixture(tmp_path)
    query.template.renderer = "missing"

    with pytest.raises(NotFoundError, match="Unknown invoice document: missing"):
        svc.create_invoices(query, now=NOW)


def test_render_invoice_without_matching_renderer(tmp_path):
    svc, query, _, _ = _billing_fixture(tmp_path)
    model = svc.create_model(query.for_customer(query.customers[0]), now=NOW)

    with pytest.raises(DomainError, match="No renderer supports"):
        svc.render_invoice(svc.get_document_by_name("timesheet"), model)


def test_delete_invoice_removes_file_and_record(tmp_path):
    svc, query, invoices, _ = _billing_fixture(tmp_path)
    invoice = svc.create_invoices(query, now=NOW)[0]
    stored = tmp_path / "invoices" / invoice.invoice_filename

    svc.delete_invoice(invoice)

    assert not stored.exists()
    assert invoices.deleted == [invoice]


def test_failed_save_removes_stored_file(tmp_path, monkeypatch):
    svc, query, invoices, items = _billing_fixture(tmp_path, mark_as_exported=True)

    def broken_save(invoice):
        raise RuntimeError("database is gone")

    monkeypatch.setattr(invoices, "save_invoice", broken_save)

    with pytest.raises(RuntimeError, match="database is gone"):
        svc.create_invoices(query, now=NOW)

    assert list((tmp_path / "invoices").glob("*")) == []
    assert invoices.saved == {}
    assert items.exported == []
