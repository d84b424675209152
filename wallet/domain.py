from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

Number = Union[int, float]


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    percent: Number = 0
    balance: Number = 0  # never negative

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "percent": self.percent, "balance": self.balance}

    @classmethod
    def from_dict(cls, d: dict) -> "Category":
        return cls(
            id=d["id"],
            name=d.get("name", ""),
            percent=d.get("percent", 0),
            balance=d.get("balance", 0),
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    title: str
    amount: Number           # + for income, - for expense
    cat_id: Optional[str]    # weak reference, may dangle
    date: str                # ISO timestamp, e.g. "2025-09-01T10:00:00.000Z"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "amount": self.amount,
            "categoryId": self.cat_id,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Transaction":
        return cls(
            id=d["id"],
            title=d.get("title", ""),
            amount=d.get("amount", 0),
            cat_id=d.get("categoryId"),
            date=d.get("date", ""),
        )


@dataclass(frozen=True)
class Goal:
    id: str
    name: str
    target_amount: Number
    saved: Number = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "targetAmount": self.target_amount,
            "saved": self.saved,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "Goal":
        return cls(
            id=d["id"],
            name=d.get("name", ""),
            target_amount=d.get("targetAmount", 0),
            saved=d.get("saved", 0),
        )


# Whole persisted state, exported and imported as one unit
@dataclass(frozen=True)
class WalletState:
    income: Number = 0
    categories: Tuple[Category, ...] = field(default_factory=tuple)
    transactions: Tuple[Transaction, ...] = field(default_factory=tuple)  # most recent first
    goals: Tuple[Goal, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "income": self.income,
            "categories": [c.to_dict() for c in self.categories],
            "transactions": [t.to_dict() for t in self.transactions],
            "goals": [g.to_dict() for g in self.goals],
        }
