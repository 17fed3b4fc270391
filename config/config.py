import os

# Shared defaults; environment modules import from here.

INVOICE_DOCUMENT_DIRS = [
    p for p in os.getenv("INVOICE_DOCUMENT_DIRS", "").split(os.pathsep) if p
] + ["templates/invoice/renderer"]

INVOICE_DATA_DIR = os.getenv("INVOICE_DATA_DIR", "var/data/invoices")

DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en")

LANGUAGE_FORMATS = {
    "en": {
        "date": "%m/%d/%Y",
        "time": "%I:%M %p",
        "duration": "{hours}:{minutes:02d} h",
        "money": "{currency} {amount:,.2f}",
    },
    "de": {
        "date": "%d.%m.%Y",
        "time": "%H:%M",
        "duration": "{hours}:{minutes:02d} h",
        "money": "{amount:.2f} {currency}",
    },
}
