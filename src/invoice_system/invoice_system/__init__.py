"""Invoice System package.

This package is organized by feature modules (customers, timesheets, invoices, ...)
with a thin Flask controller layer and service/repository layers.
"""
