from __future__ import annotations

from functools import wraps
from typing import Any, Dict

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_datetime
from ..container import Container
from ..core.exceptions import DomainError, NotFoundError, ValidationError
from .model import Invoice, InvoiceModel
from .query import InvoiceQuery


def invoice_to_json(invoice: Invoice) -> Dict[str, Any]:
    return {
        "id": invoice.invoice_id,
        "number": invoice.invoice_number,
        "customer": invoice.customer.name,
        "created_at": invoice.created_at.isoformat(),
        "due_date": invoice.due_date.isoformat(),
        "total": str(invoice.total),
        "tax": str(invoice.tax),
        "currency": invoice.currency,
        "status": invoice.status.value,
        "payment_date": invoice.payment_date.isoformat() if invoice.payment_date else None,
        "filename": invoice.invoice_filename,
    }


def model_to_json(model: InvoiceModel) -> Dict[str, Any]:
    calc = model.calculation or model.calculate()
    query = model.query
    return {
        "customer": model.customer.name if model.customer else None,
        "number": model.invoice_number,
        "begin": query.begin.isoformat() if query and query.begin else None,
        "end": query.end.isoformat() if query and query.end else None,
        "entries": len(calc.entries),
        "time_worked": calc.time_worked,
        "subtotal": str(calc.subtotal),
        "tax": str(calc.tax),
        "total": str(calc.total),
        "currency": calc.currency,
    }


def register(app: Flask, container: Container) -> None:
    service = container.invoice_service

    def json_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"success": False, "message": str(e)}), 400
            except NotFoundError as e:
                return jsonify({"success": False, "message": str(e)}), 404
            except DomainError as e:
                app.logger.warning("Invoice request failed: %s", e)
                return jsonify({"success": False, "message": str(e)}), 422

        return wrapper

    def build_query(payload: Dict[str, Any]) -> InvoiceQuery:
        raw_ids = payload.get("customer_ids")
        if raw_ids is None:
            raw_ids = []
        if not isinstance(raw_ids, list) or any(isinstance(i, bool) for i in raw_ids):
            raise ValidationError("Invalid invoice request")

        try:
            customer_ids = {int(i) for i in raw_ids}
            template_id = payload.get("template_id")
            template_id = int(template_id) if template_id is not None else None
            begin = parse_iso_datetime(payload["begin"]) if payload.get("begin") else None
            end = parse_iso_datetime(payload["end"]) if payload.get("end") else None
        except (TypeError, ValueError):
            raise ValidationError("Invalid invoice request") from None

        customers = list(container.customers_repo.get_by_ids(sorted(customer_ids)))
        if len(customers) != len(customer_ids):
            raise NotFoundError("Unknown customer")

        template = None
        if template_id is not None:
            template = container.templates_repo.get_by_id(template_id)
            if template is None:
                raise NotFoundError("Unknown invoice template")

        return InvoiceQuery(
            customers=customers,
            template=template,
            begin=begin,
            end=end,
            exported=payload.get("exported", False),
            mark_as_exported=bool(payload.get("mark_as_exported", False)),
            search_term=payload.get("search_term") or None,
        )

    @app.route("/api/invoices/documents", methods=["GET"], endpoint="api_invoice_documents")
    def api_invoice_documents():
        documents = [{"name": d.name, "filename": d.filename} for d in service.get_documents()]
        return jsonify({"success": True, "documents": documents})

    @app.route("/api/invoices/preview", methods=["POST"], endpoint="api_invoice_preview")
    @json_errors
    def api_invoice_preview():
        query = build_query(request.get_json(silent=True) or {})
        models = service.create_models(query)
        return jsonify({"success": True, "models": [model_to_json(m) for m in models]})

    @app.route("/api/invoices", methods=["POST"], endpoint="api_invoice_create")
    @json_errors
    def api_invoice_create():
        query = build_query(request.get_json(silent=True) or {})
        invoices = service.create_invoices(query)
        return jsonify({"success": True, "invoices": [invoice_to_json(i) for i in invoices]}), 201

    @app.route("/api/invoices/<int:invoice_id>/status", methods=["POST"], endpoint="api_invoice_status")
    @json_errors
    def api_invoice_status(invoice_id: int):
        invoice = container.invoices_repo.get_by_id(invoice_id)
        if invoice is None:
            raise NotFoundError("Invoice not found")

        payload = request.get_json(silent=True) or {}
        service.change_invoice_status(invoice, payload.get("status"))
        return jsonify({"success": True, "invoice": invoice_to_json(invoice)})
