from datetime import datetime

import pytest

from src.invoice_system.invoice_system.core.exceptions import DomainError
from src.invoice_system.invoice_system.invoices.model import InvoiceTemplate
from src.invoice_system.invoice_system.invoices.numbers.date_number_generator import DateNumberGenerator
from src.invoice_system.invoice_system.invoices.numbers.increment_number_generator import (
    IncrementingNumberGenerator,
)

NOW = datetime(2024, 5, 3, 16, 45)


class FakeInvoices:
    def __init__(self, numbers=()):
        self.numbers = set(numbers)
        self.checked: list[str] = []

    def has_invoice(self, invoice_number):
        self.checked.append(invoice_number)
        return invoice_number in self.numbers

    def count_invoices(self):
        return len(self.numbers)


class AllTakenInvoices(FakeInvoices):
    def has_invoice(self, invoice_number):
        self.checked.append(invoice_number)
        return True


def test_date_generator_uses_invoice_date():
    generator = DateNumberGenerator(FakeInvoices())

    assert generator.get_id() == "date"
    assert generator.get_invoice_number(InvoiceTemplate(), now=NOW) == "240503"


def test_date_generator_appends_suffix_on_collision():
    repo = FakeInvoices({"240503", "240503-1"})
    generator = DateNumberGenerator(repo)

    assert generator.get_invoice_number(InvoiceTemplate(), now=NOW) == "240503-2"
    assert repo.checked == ["240503", "240503-1", "240503-2"]


def test_date_generator_gives_up_after_max_attempts():
    taken = {"240503"} | {f"240503-{i}" for i in range(1, 100)}
    generator = DateNumberGenerator(FakeInvoices(taken))

    with pytest.raises(DomainError):
        generator.get_invoice_number(InvoiceTemplate(), now=NOW)


def test_incrementing_generator_counts_invoices():
    assert IncrementingNumberGenerator(FakeInvoices()).get_invoice_number(InvoiceTemplate()) == "1"
    assert IncrementingNumberGenerator(FakeInvoices({"1", "2"})).get_invoice_number(InvoiceTemplate()) == "3"


def test_incrementing_generator_skips_taken_numbers():
    generator = IncrementingNumberGenerator(FakeInvoices({"1", "3"}))

    assert generator.get_id() == "increment"
    assert generator.get_invoice_number(InvoiceTemplate()) == "4"


def test_incrementing_generator_tries_max_attempts_candidates():
    repo = AllTakenInvoices()

    with pytest.raises(DomainError, match="after 99 attempts"):
        IncrementingNumberGenerator(repo).get_invoice_number(InvoiceTemplate())
    assert len(repo.checked) == 99
