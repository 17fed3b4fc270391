from __future__ import annotations

from abc import ABC, abstractmethod

from werkzeug.utils import secure_filename

from ..model import InvoiceDocument, InvoiceModel, RenderedInvoice


class InvoiceRenderer(ABC):
    """Renderer interface (Strategy Pattern for invoice documents)."""

    @abstractmethod
    def get_id(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def supports(self, document: InvoiceDocument) -> bool:
        raise NotImplementedError

    @abstractmethod
    def render(self, document: InvoiceDocument, model: InvoiceModel) -> RenderedInvoice:
        raise NotImplementedError

    @staticmethod
    def build_filename(model: InvoiceModel, extension: str) -> str:
        stem = secure_filename(model.invoice_number or "") or "invoice"
        return f"{stem}{extension}"
