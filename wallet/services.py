from typing import Any, List, Optional

from wallet import transforms
from wallet.domain import Goal, Transaction, WalletState
from wallet.events import (
    CATEGORIES_CHANGED,
    FUNDS_DISTRIBUTED,
    GOAL_CREATED,
    INCOME_CHANGED,
    OVERDRAFT_CLAMPED,
    STATE_EVENTS,
    STATE_IMPORTED,
    TRANSACTION_ADDED,
    Event,
    EventBus,
    register_default_handlers,
)
from wallet.functional import Either, Right, safe_category, to_number
from wallet.logging_setup import get_logger
from wallet.snapshot import safe_import, serialize
from wallet.storage import LocalStore, StorageError

logger = get_logger("wallet.services")


class WalletService:
    """Facade the presentation layer talks to.

    Holds the current ``WalletState`` and runs the pure operations from
    ``wallet.transforms`` on explicit calls.  After each operation the new
    state replaces the old one, a named event is published on ``bus`` and the
    state is written to ``store``.  A failed write is logged and kept on
    ``last_error``; it never undoes the in-memory change.
    """

    def __init__(self, store: Optional[LocalStore] = None, bus: Optional[EventBus] = None,
                 state: Optional[WalletState] = None):
        self.store = store or LocalStore()
        self.bus = bus or EventBus()
        if bus is None:
            register_default_handlers(self.bus)
        for name in STATE_EVENTS:
            self.bus.subscribe(name, self._persist_handler)

        self.state = state if state is not None else self.store.load_state()
        self.last_error: Optional[str] = None
        self.alerts: List[str] = []

    def _persist_handler(self, event: Event, payload: dict) -> dict:
        return {"persisted": self.persist()}

    def persist(self) -> bool:
        try:
            self.store.save_state(self.state)
        except StorageError as e:
            logger.exception("could not persist wallet state")
            self.last_error = str(e)
            return False
        self.last_error = None
        return True

    def _commit(self, new_state: WalletState, event_name: str, payload: dict) -> List[dict]:
        self.state = new_state
        results = self.bus.publish(event_name, payload)
        self.alerts.extend(r["alert"] for r in results if isinstance(r, dict) and r.get("alert"))
        return results

    def pop_alerts(self) -> List[str]:
        alerts, self.alerts = self.alerts, []
        return alerts

    def set_income(self, income: Any) -> WalletState:
        new_state = transforms.set_income(self.state, income)
        logger.info("income set to %s", new_state.income)
        self._commit(new_state, INCOME_CHANGED, {"income": new_state.income})
        return self.state

    def distribute(self) -> WalletState:
        new_state = transforms.distribute_state(self.state)
        logger.info("distributed %s across %d categories", new_state.income, len(new_state.categories))
        self._commit(new_state, FUNDS_DISTRIBUTED, {"income": new_state.income})
        return self.state

    def add_category(self, name: str = "New") -> WalletState:
        categories = transforms.add_category(self.state.categories, name)
        self._commit(self._with_categories(categories), CATEGORIES_CHANGED,
                     {"action": "add", "category_id": categories[-1].id})
        return self.state

    def update_category(self, cat_id: str, name: Optional[str] = None, percent: Any = None) -> WalletState:
        categories = transforms.update_category(self.state.categories, cat_id, name=name, percent=percent)
        if categories != self.state.categories:
            self._commit(self._with_categories(categories), CATEGORIES_CHANGED,
                         {"action": "update", "category_id": cat_id})
        return self.state

    def remove_category(self, cat_id: str) -> WalletState:
        categories = transforms.remove_category(self.state.categories, cat_id)
        self._commit(self._with_categories(categories), CATEGORIES_CHANGED,
                     {"action": "remove", "category_id": cat_id})
        return self.state

    def _with_categories(self, categories) -> WalletState:
        return WalletState(
            income=self.state.income,
            categories=categories,
            transactions=self.state.transactions,
            goals=self.state.goals,
        )

    def add_transaction(self, title: str, amount: Any, cat_id: Optional[str],
                        tx_type: str = transforms.EXPENSE) -> Transaction:
        source = safe_category(self.state.categories, cat_id)
        tx, new_state = transforms.add_transaction(self.state, title, amount, cat_id, tx_type)
        logger.info("transaction %s (%s) recorded: %s", tx.id, title, tx.amount)
        self._commit(new_state, TRANSACTION_ADDED, {"transaction_id": tx.id, "amount": tx.amount})

        if source.is_some():
            category = source.get_or_else(None)
            balance_before = to_number(category.balance)
            if balance_before + tx.amount < 0:
                logger.warning("expense %s on %s clamped at zero (balance was %s)",
                               tx.amount, category.name, balance_before)
                self._commit(self.state, OVERDRAFT_CLAMPED, {
                    "category_id": category.id,
                    "category": category.name,
                    "amount": tx.amount,
                    "balance_before": balance_before,
                })
        return tx

    def create_goal(self, name: str, target_amount: Any, from_cat_id: Optional[str] = None) -> Goal:
        goal, new_state = transforms.create_goal(self.state, name, target_amount, from_cat_id or None)
        logger.info("goal %s (%s) created with %s saved of %s", goal.id, name, goal.saved, goal.target_amount)
        self._commit(new_state, GOAL_CREATED, {
            "goal_id": goal.id,
            "name": goal.name,
            "saved": goal.saved,
            "target_amount": goal.target_amount,
        })
        return goal

    def export(self) -> bytes:
        return serialize(self.state)

    def import_(self, data: bytes) -> Either[dict, WalletState]:
        result = safe_import(data, self.state)
        if result.is_left():
            logger.warning("import rejected: %s", result.get_error()["message"])
            return result

        new_state = result.get_or_else(self.state)
        # a changed income redistributes, as set_income does
        income_changed = to_number(new_state.income) != to_number(self.state.income)
        if income_changed:
            new_state = transforms.distribute_state(new_state)
        logger.info("state imported (income changed: %s)", income_changed)
        self._commit(new_state, STATE_IMPORTED, {"income_changed": income_changed})
        return Right(new_state)
