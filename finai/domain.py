from dataclasses import dataclass, asdict
from typing import Optional

LOW = "low"
MEDIUM = "medium"
HIGH = "high"

# canonical tier ordering
RISK_TIERS = (LOW, MEDIUM, HIGH)


@dataclass(frozen=True)
class Category:
    name: str        # unique key
    limit: float     # monthly budget
    amount: float    # spent so far this month

    @property
    def percentage(self) -> float:
        if self.limit == 0:
            return 0.0
        return self.amount / self.limit * 100

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "limit": self.limit,
            "amount": self.amount,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class Expense:
    id: str
    category: str      # Category.name
    amount: float      # always > 0
    description: str
    date: str          # e.g. "2025-09-01"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Investment:
    id: str
    name: str
    type: str          # tier invested under, or "stock" / "savings" for seed records
    amount: float
    return_rate: float
    risk: str
    description: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class FinanceState:
    income: float
    categories: tuple[Category, ...]
    expenses: tuple[Expense, ...] = ()
    investments: tuple[Investment, ...] = ()
    invested: float = 0.0   # total debited from savings by invest operations
    savings: float = 0.0    # cached, kept equal to derive_savings(...)

    def category(self, name: str) -> Optional[Category]:
        for cat in self.categories:
            if cat.name == name:
                return cat
        return None

    def to_dict(self) -> dict:
        return {
            "income": self.income,
            "expenses": [e.to_dict() for e in self.expenses],
            "categories": [c.to_dict() for c in self.categories],
            "investments": [i.to_dict() for i in self.investments],
            "savings": self.savings,
            "invested": self.invested,
        }


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str


@dataclass(frozen=True)
class BudgetSummary:
    total_spent: float
    total_budget: float
    remaining: float
    used_percentage: float
