"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_MAX_OCCURRENCES = 52
DEFAULT_LATE_HOURS_FRACTION = Decimal("0.5")
DEFAULT_LOW_BALANCE_THRESHOLD = Decimal("0.20")
DEFAULT_DB_RETRY_ATTEMPTS = 3
DEFAULT_DB_RETRY_BACKOFF_SECONDS = 0.1

HOURS_QUANTUM = Decimal("0.01")
SECONDS_PER_HOUR = Decimal(3600)
DAYS_PER_WEEK = 7

# Largest values the DECIMAL columns in database/schema.sql can hold.
MAX_ATTENDED_HOURS = Decimal("9999.99")
MAX_PACKAGE_HOURS = Decimal("999999.99")
MAX_PRICE = Decimal("99999999.99")
