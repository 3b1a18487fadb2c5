import os
from pathlib import Path

from .constants import DATA_DIR, DB_FILE_NAME, USER_DATA_DIR

BASE_DIR = Path(__file__).resolve().parent


def _default_data_path() -> Path:
    # source checkout keeps data beside the package; installed runs use the home dir
    if (BASE_DIR.parent / "pyproject.toml").exists():
        return BASE_DIR.parent / DATA_DIR
    return Path.home() / USER_DATA_DIR


DATA_PATH = Path(os.environ.get("POS_LEDGER_DATA_DIR") or _default_data_path()).expanduser()
DB_PATH = Path(os.environ.get("POS_LEDGER_DB") or DATA_PATH / DB_FILE_NAME).expanduser()

LOG_LEVEL = os.environ.get("POS_LEDGER_LOG_LEVEL", "INFO").upper()
