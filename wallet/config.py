"""Configuration for Wallet Saver.

Paths, storage keys and seed defaults live here.  Paths and the log level
can be overridden through environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("WALLET_SAVER_DATA_DIR", _PROJECT_ROOT / "data")).resolve()

LOG_LEVEL = os.getenv("WALLET_SAVER_LOG_LEVEL", "INFO")

EXPORT_FILENAME = "wallet-saver-export.json"

# Local store keys
INCOME_KEY = "ws_income"
CATEGORIES_KEY = "ws_categories"
TRANSACTIONS_KEY = "ws_tx"
GOALS_KEY = "ws_goals"
STORE_KEYS = (INCOME_KEY, CATEGORIES_KEY, TRANSACTIONS_KEY, GOALS_KEY)

DEFAULT_INCOME = 50000
DEFAULT_CATEGORIES = (
    ("Essentials", 50),
    ("Savings", 20),
    ("Wants", 30),
)


def ensure_data_directories(data_dir: Path | None = None) -> Path:
    """Create the data directory if it doesn't exist and return it."""
    target = data_dir or DATA_DIR
    target.mkdir(parents=True, exist_ok=True)
    return target
