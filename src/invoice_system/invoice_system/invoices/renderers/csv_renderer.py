from __future__ import annotations

import csv
import io

from ..model import InvoiceDocument, InvoiceModel, RenderedInvoice
from .base import InvoiceRenderer


class CsvRenderer(InvoiceRenderer):
    """Renders ``*.csv`` documents.

    The document's first row names the entry columns to export, e.g.
    ``date,description,duration,rate``; one row is written per invoice line.
    """

    def get_id(self) -> str:
        return "csv"

    def supports(self, document: InvoiceDocument) -> bool:
        return document.extension == ".csv"

    def render(self, document: InvoiceDocument, model: InvoiceModel) -> RenderedInvoice:
        header = document.path.read_text(encoding="utf-8").splitlines()[:1]
        columns = [c.strip() for c in next(csv.reader(header), []) if c.strip()]

        context = model.to_context()
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(columns)
        for entry in context["entries"]:
            writer.writerow([entry.get(col, "") for col in columns])

        return RenderedInvoice(
            content=buf.getvalue().encode("utf-8"),
            filename=self.build_filename(model, ".csv"),
            content_type="text/csv; charset=utf-8",
        )
