from __future__ import annotations

from enum import Enum


class InvoiceStatus(str, Enum):
    """Closed set of invoice states stored in the database.

    Any state may move to any other; only unknown names are rejected.
    """

    NEW = "new"
    PENDING = "pending"
    PAID = "paid"
    CANCELED = "canceled"
