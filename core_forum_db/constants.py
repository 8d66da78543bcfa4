# core_forum_db/constants.py
"""
Constants for forum query building and transaction handling
"""

# Retry constants (seconds)
DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_DELAY = 0.1
DEFAULT_MAX_DELAY = 5.0
DEFAULT_BACKOFF_MULTIPLIER = 2.0

# Pagination
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 1000

# Logging
SLOW_QUERY_THRESHOLD = 1.0

# Environment
ENV_PREFIX = "FORUM_DB_"

# Identifier pattern for names interpolated into SQL (savepoints)
IDENTIFIER_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"

# Transaction id prefix
TRANSACTION_ID_PREFIX = "tx_"

# Vendor error codes (PostgreSQL SQLSTATE and socket level)
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"
CONNECTION_REFUSED = "ECONNREFUSED"
HOST_NOT_FOUND = "ENOTFOUND"

# Taxonomy codes
QUERY_ERROR = "QUERY_ERROR"
CONNECTION_ERROR = "CONNECTION_ERROR"
TRANSACTION_ERROR = "TRANSACTION_ERROR"
VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
DUPLICATE_ERROR = "DUPLICATE_ERROR"
