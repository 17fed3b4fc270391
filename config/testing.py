import os

from .config import DEFAULT_LANGUAGE, INVOICE_DOCUMENT_DIRS, LANGUAGE_FORMATS  # noqa: F401

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "invoice_test_db"),
}

INVOICE_DATA_DIR = os.getenv("INVOICE_DATA_DIR", "var/test/invoices")

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
