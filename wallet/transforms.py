import math
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional, Tuple
from uuid import uuid4

from wallet.domain import Category, Goal, Number, Transaction, WalletState
from wallet.functional import safe_category, to_number
from wallet.logging_setup import get_logger

logger = get_logger("wallet.transforms")

EXPENSE = "expense"
INCOME = "income"


def uid(prefix: str = "id") -> str:
    return prefix + uuid4().hex[:7]


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def round_half_up(x: float) -> int:
    # 2.5 -> 3, -2.5 -> -2
    return math.floor(x + 0.5)


def _weight(c: Category) -> Number:
    # negative weights count as unallocated
    return max(to_number(c.percent), 0)


def total_percent(categories: Tuple[Category, ...]) -> Number:
    return sum(_weight(c) for c in categories)


def distribute(income: Any, categories: Tuple[Category, ...]) -> Tuple[Category, ...]:
    """Recompute every category balance from income and percent weights.

    Prior balances are discarded.  With no weights at all the income is
    split into equal floored shares and the remainder is dropped; otherwise
    each balance is its rounded proportional share.
    """
    if not categories:
        return categories

    amount = to_number(income)
    tp = total_percent(categories)
    if tp == 0:
        equal = math.floor(amount / len(categories))
        new_cats = tuple(replace(c, balance=equal) for c in categories)
    else:
        new_cats = tuple(
            replace(c, balance=round_half_up(_weight(c) / max(tp, 1) * amount))
            for c in categories
        )
    logger.debug("distributed %s across %d categories (total percent %s)", amount, len(categories), tp)
    return new_cats


def distribute_state(state: WalletState) -> WalletState:
    return replace(state, categories=distribute(state.income, state.categories))


def set_income(state: WalletState, income: Any) -> WalletState:
    """Store a new income and redistribute it."""
    new_state = replace(state, income=to_number(income))
    return distribute_state(new_state)


def add_category(categories: Tuple[Category, ...], name: str = "New") -> Tuple[Category, ...]:
    return categories + (Category(id=uid("cat"), name=name, percent=0, balance=0),)


def update_category(
    categories: Tuple[Category, ...],
    cat_id: str,
    name: Optional[str] = None,
    percent: Any = None,
) -> Tuple[Category, ...]:
    def _patch(c: Category) -> Category:
        if c.id != cat_id:
            return c
        if name is not None:
            c = replace(c, name=name)
        if percent is not None:
            c = replace(c, percent=to_number(percent))
        return c

    return tuple(_patch(c) for c in categories)


def remove_category(categories: Tuple[Category, ...], cat_id: str) -> Tuple[Category, ...]:
    # transactions keep their (now dangling) cat_id
    return tuple(c for c in categories if c.id != cat_id)


def signed_amount(amount: Any, tx_type: str = EXPENSE) -> Number:
    amt = abs(to_number(amount))
    return -amt if tx_type == EXPENSE else amt


def add_transaction(
    state: WalletState,
    title: str,
    amount: Any,
    cat_id: Optional[str],
    tx_type: str = EXPENSE,
    date: Optional[str] = None,
) -> Tuple[Transaction, WalletState]:
    signed = signed_amount(amount, tx_type)
    tx = Transaction(id=uid("tx"), title=title, amount=signed, cat_id=cat_id, date=date or now_iso())

    categories = state.categories
    if safe_category(categories, cat_id).is_some():
        # overdrafts floor at zero
        categories = tuple(
            replace(c, balance=max(0, to_number(c.balance) + signed)) if c.id == cat_id else c
            for c in categories
        )
    else:
        logger.debug("transaction %s has no resolvable category (%r)", tx.id, cat_id)

    new_state = replace(state, categories=categories, transactions=(tx,) + state.transactions)
    return tx, new_state


def transfer_amount(balance: Number, target_amount: Number) -> Number:
    if balance <= 0:
        return 0
    return max(0, min(balance, target_amount))


def create_goal(
    state: WalletState,
    name: str,
    target_amount: Any,
    from_cat_id: Optional[str] = None,
) -> Tuple[Goal, WalletState]:
    goal = Goal(id=uid("g"), name=name, target_amount=to_number(target_amount), saved=0)
    categories = state.categories

    transfer = (
        safe_category(categories, from_cat_id)
        .map(lambda c: transfer_amount(to_number(c.balance), goal.target_amount))
        .get_or_else(0)
    )
    if transfer > 0:
        categories = tuple(
            replace(c, balance=to_number(c.balance) - transfer) if c.id == from_cat_id else c
            for c in categories
        )
        goal = replace(goal, saved=goal.saved + transfer)

    new_state = replace(state, categories=categories, goals=state.goals + (goal,))
    return goal, new_state


def goal_progress(goal: Goal) -> float:
    """Percentage of the target saved, capped at 100."""
    target = to_number(goal.target_amount)
    return min(100.0, to_number(goal.saved) / max(1, target) * 100)
