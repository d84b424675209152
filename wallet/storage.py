"""Local key-value store for the wallet state.

Each of the four logical keys is kept in its own JSON file inside the data
directory.  Loading never fails: a missing or unreadable key falls back to
its default on its own.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

from wallet.config import (
    CATEGORIES_KEY,
    DATA_DIR,
    DEFAULT_CATEGORIES,
    DEFAULT_INCOME,
    GOALS_KEY,
    INCOME_KEY,
    STORE_KEYS,
    TRANSACTIONS_KEY,
    ensure_data_directories,
)
from wallet.domain import Category, Goal, Transaction, WalletState
from wallet.logging_setup import get_logger
from wallet.transforms import distribute, uid

logger = get_logger("wallet.storage")

_MISSING = object()


class StorageError(OSError):
    """Raised when the store cannot write its files."""


def default_categories() -> tuple[Category, ...]:
    return tuple(
        Category(id=uid("cat"), name=name, percent=percent, balance=0)
        for name, percent in DEFAULT_CATEGORIES
    )


def default_state() -> WalletState:
    return WalletState(
        income=DEFAULT_INCOME,
        categories=default_categories(),
        transactions=(),
        goals=(),
    )


class LocalStore:
    """JSON-file key-value store."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir) if data_dir else DATA_DIR

    def get_path(self, key: str) -> Path:
        if key not in STORE_KEYS:
            raise KeyError(f"Unknown store key: {key}")
        return self.data_dir / f"{key}.json"

    def get(self, key: str, fallback: Any = None) -> Any:
        target = self.get_path(key)
        if not target.exists():
            return fallback
        try:
            with target.open('r', encoding='utf-8') as handle:
                return json.load(handle)
        except (ValueError, RecursionError, OSError) as e:
            # bad JSON, bad UTF-8, oversized numbers, deep nesting
            logger.warning("could not read %s, using default: %s", target, e)
            return fallback

    def _stage(self, key: str, value: Any) -> Path:
        target = self.get_path(key)
        staged = target.with_name(target.name + ".tmp")
        try:
            ensure_data_directories(self.data_dir)
            with staged.open('w', encoding='utf-8') as handle:
                json.dump(value, handle, indent=2)
        except (OSError, TypeError, ValueError) as e:
            if staged.exists():
                staged.unlink()
            raise StorageError(f"Failed to write {key} to {target}: {e}") from e
        return staged

    def _commit(self, staged: dict) -> None:
        try:
            for key, path in staged.items():
                path.replace(self.get_path(key))
        except OSError as e:
            raise StorageError(f"Failed to replace store files in {self.data_dir}: {e}") from e

    def set(self, key: str, value: Any) -> None:
        self._commit({key: self._stage(key, value)})

    def _load_field(self, key: str, build: Callable[[Any], Any], default: Callable[[], Any]) -> Any:
        raw = self.get(key, _MISSING)
        if raw is _MISSING or raw is None:
            return default()
        try:
            return build(raw)
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            logger.warning("malformed %s in store, using default: %s", key, e)
            return default()

    def load_state(self) -> WalletState:
        """Read all four keys, each falling back to its default independently.

        Seeded default categories are distributed against the loaded income
        so a fresh profile starts with funded categories.
        """
        income = self._load_field(INCOME_KEY, _number, lambda: DEFAULT_INCOME)
        categories = self._load_field(
            CATEGORIES_KEY, lambda raw: tuple(Category.from_dict(c) for c in raw), lambda: _MISSING
        )
        if categories is _MISSING:
            categories = distribute(income, default_categories())
        transactions = self._load_field(
            TRANSACTIONS_KEY, lambda raw: tuple(Transaction.from_dict(t) for t in raw), tuple
        )
        goals = self._load_field(GOALS_KEY, lambda raw: tuple(Goal.from_dict(g) for g in raw), tuple)
        return WalletState(income=income, categories=categories, transactions=transactions, goals=goals)

    def save_state(self, state: WalletState) -> None:
        """Write all four keys; no file is replaced unless every key was written."""
        payload = state.to_dict()
        staged: dict = {}
        try:
            for key, field in ((INCOME_KEY, "income"), (CATEGORIES_KEY, "categories"),
                               (TRANSACTIONS_KEY, "transactions"), (GOALS_KEY, "goals")):
                staged[key] = self._stage(key, payload[field])
        except StorageError:
            for path in staged.values():
                path.unlink(missing_ok=True)
            raise
        self._commit(staged)


def _number(raw: Any) -> Any:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise TypeError(f"expected a number, got {type(raw).__name__}")
    return raw
