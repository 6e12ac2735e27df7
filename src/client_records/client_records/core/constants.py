"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_HOURS = 24
DEFAULT_CLIENTS_FILE = "data/clients.json"

SESSION_AUTH_KEY = "is_authenticated"
SESSION_SIGNER_SALT = "client-records-session"

DUPLICATE_CLIENT_CODE = "DUPLICATE_CLIENT"
DUPLICATE_CLIENT_MESSAGE = "A client with the same name and mobile number already exists"
SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."

# Amounts are stored as DECIMAL(12, 2).
AMOUNT_DECIMALS = 2
MAX_AMOUNT = 9999999999.99
