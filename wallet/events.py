from typing import Callable, Dict, List, NamedTuple
from datetime import datetime

__all__ = [
    'Event', 'EventBus', 'register_default_handlers',
    'INCOME_CHANGED', 'FUNDS_DISTRIBUTED', 'CATEGORIES_CHANGED', 'TRANSACTION_ADDED',
    'GOAL_CREATED', 'STATE_IMPORTED', 'OVERDRAFT_CLAMPED', 'STATE_EVENTS',
]

class Event(NamedTuple):
    name: str
    ts: str
    payload: dict

class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in list(self._subscribers[name])]

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)

INCOME_CHANGED = "INCOME_CHANGED"
FUNDS_DISTRIBUTED = "FUNDS_DISTRIBUTED"
CATEGORIES_CHANGED = "CATEGORIES_CHANGED"
TRANSACTION_ADDED = "TRANSACTION_ADDED"
GOAL_CREATED = "GOAL_CREATED"
STATE_IMPORTED = "STATE_IMPORTED"
OVERDRAFT_CLAMPED = "OVERDRAFT_CLAMPED"

# events after which the state has changed and must be persisted
STATE_EVENTS = (
    INCOME_CHANGED, FUNDS_DISTRIBUTED, CATEGORIES_CHANGED,
    TRANSACTION_ADDED, GOAL_CREATED, STATE_IMPORTED,
)

def check_overdraft_handler(event: Event, payload: dict) -> dict:
    amount = payload.get("amount", 0)
    balance_before = payload.get("balance_before", 0)
    category = payload.get("category", "")

    if amount < 0 and balance_before + amount < 0:
        shortfall = -(balance_before + amount)
        return {
            "alert": f"Expense of {abs(amount):,} exceeds the {category} balance of {balance_before:,}; "
                     f"{shortfall:,} was absorbed",
            "category_id": payload.get("category_id"),
            "shortfall": shortfall,
        }
    return {}

def goal_funded_handler(event: Event, payload: dict) -> dict:
    saved = payload.get("saved", 0)
    target = payload.get("target_amount", 0)

    if saved > 0 and saved >= target:
        return {"alert": f"Goal {payload.get('name', '')} is fully funded: {saved:,} / {target:,}"}
    return {}

def register_default_handlers(bus: EventBus) -> None:
    bus.subscribe(OVERDRAFT_CLAMPED, check_overdraft_handler)
    bus.subscribe(GOAL_CREATED, goal_funded_handler)
