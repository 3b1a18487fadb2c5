# pos_ledger/constants.py
APP_NAME = "POS Ledger"

DATA_DIR = "data"
USER_DATA_DIR = ".pos_ledger"
DB_FILE_NAME = "shop.db"

TABLE_SCHEMA_VERSION = "schema_version"
SCHEMA_VERSION = "1.0.0"

# Money is stored as integer minor units (e.g. cents)
MONEY_PLACES = 2
# SQLite INTEGER is signed 64-bit
MAX_INTEGER = 2**63 - 1

PAYMENT_CASH = "cash"
PAYMENT_CREDIT = "credit"

WINDOW_TODAY = "today"
WINDOW_LAST_7_DAYS = "last_7_days"
WINDOW_THIS_MONTH = "this_month"

HISTORY_LIMIT = 20
LOW_STOCK_THRESHOLD = 5
DEFAULT_UNIT = "unit"

# Local wall-clock timestamps, sortable as text
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"
