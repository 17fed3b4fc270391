"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_LANGUAGE = "en"
DEFAULT_CURRENCY = "EUR"
DEFAULT_DUE_DAYS = 30

DEFAULT_CALCULATOR = "default"
DEFAULT_NUMBER_GENERATOR = "date"
DEFAULT_DOCUMENT = "default"

# Upper bound for collision retries when generating invoice numbers.
MAX_NUMBER_ATTEMPTS = 99
