from __future__ import annotations

from typing import Optional

from jinja2 import Environment, select_autoescape

from ..model import InvoiceDocument, InvoiceModel, RenderedInvoice
from .base import InvoiceRenderer


class HtmlRenderer(InvoiceRenderer):
    """Renders ``*.html.j2`` documents with Jinja2."""

    EXTENSION = ".html.j2"

    def __init__(self, env: Optional[Environment] = None):
        self._env = env or Environment(autoescape=select_autoescape(default=True, default_for_string=True))

    def get_id(self) -> str:
        return "html"

    def supports(self, document: InvoiceDocument) -> bool:
        return document.extension == self.EXTENSION

    def render(self, document: InvoiceDocument, model: InvoiceModel) -> RenderedInvoice:
        template = self._env.from_string(document.path.read_text(encoding="utf-8"))
        html = template.render(**model.to_context())
        return RenderedInvoice(
            content=html.encode("utf-8"),
            filename=self.build_filename(model, ".html"),
            content_type="text/html; charset=utf-8",
        )
