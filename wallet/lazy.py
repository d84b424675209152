from typing import Iterable, Iterator, Optional, Tuple

from wallet.domain import Category, Transaction
from wallet.functional import safe_category

UNKNOWN_CATEGORY = "unknown"


def category_label(cats: Tuple[Category, ...], cat_id: Optional[str]) -> str:
    return safe_category(cats, cat_id).map(lambda c: c.name).get_or_else(UNKNOWN_CATEGORY)


def labelled_transactions(
    trans: Iterable[Transaction], cats: Tuple[Category, ...]
) -> Iterator[Tuple[Transaction, str]]:
    """Pair each transaction with its category name, resolved lazily."""
    name_by_id: dict[str, str] = {c.id: c.name for c in cats}
    for t in trans:
        label = name_by_id.get(t.cat_id, UNKNOWN_CATEGORY) if t.cat_id else UNKNOWN_CATEGORY
        yield t, label
