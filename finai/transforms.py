import json
from functools import reduce
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from finai.domain import Category, Expense, Investment, FinanceState

SEED_PATH = Path(__file__).parent / "data" / "seed.json"


def load_seed(path: Union[str, Path] = SEED_PATH) -> Dict[str, Any]:
    """Read the documented initial ledger values (raw JSON fields)."""
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def category_from_dict(d: dict) -> Category:
    # percentage is always derived, a stored value is ignored
    return Category(name=d["name"], limit=float(d["limit"]), amount=float(d["amount"]))


def expense_from_dict(d: dict) -> Expense:
    return Expense(
        id=d["id"],
        category=d["category"],
        amount=float(d["amount"]),
        description=d.get("description", ""),
        date=d.get("date", ""),
    )


def investment_from_dict(d: dict) -> Investment:
    return Investment(
        id=d["id"],
        name=d["name"],
        type=d.get("type", d.get("risk", "")),
        amount=float(d["amount"]),
        return_rate=float(d.get("return_rate", d.get("returnRate", 0.0))),
        risk=d["risk"],
        description=d.get("description", ""),
    )


def total_spent(cats: Tuple[Category, ...]) -> float:
    return reduce(lambda acc, c: acc + c.amount, cats, 0.0)


def total_budget(cats: Tuple[Category, ...]) -> float:
    return reduce(lambda acc, c: acc + c.limit, cats, 0.0)


def derive_savings(income: float, cats: Tuple[Category, ...], invested: float = 0.0) -> float:
    return income - total_spent(cats) - invested


def savings_rate(savings: float, income: float) -> float:
    if income == 0:
        return 0.0
    return savings / income * 100


def add_expense(
    expenses: Tuple[Expense, ...], e: Expense
) -> Tuple[Expense, ...]:
    return expenses + (e,)


def add_investment(
    investments: Tuple[Investment, ...], inv: Investment
) -> Tuple[Investment, ...]:
    return investments + (inv,)


def add_to_category(
    cats: Tuple[Category, ...], name: str, amount: float
) -> Tuple[Category, ...]:
    return tuple(
        Category(
            name=c.name,
            limit=c.limit,
            amount=c.amount + amount if c.name == name else c.amount,
        )
        for c in cats
    )


def update_category_limit(
    cats: Tuple[Category, ...], name: str, new_limit: float
) -> Tuple[Category, ...]:
    return tuple(
        Category(
            name=c.name,
            limit=new_limit if c.name == name else c.limit,
            amount=c.amount,
        )
        for c in cats
    )


def resync(state: FinanceState) -> FinanceState:
    """Return ``state`` with its cached savings recomputed."""
    savings = derive_savings(state.income, state.categories, state.invested)
    return FinanceState(
        income=state.income,
        categories=state.categories,
        expenses=state.expenses,
        investments=state.investments,
        invested=state.invested,
        savings=savings,
    )


def state_from_dict(data: Dict[str, Any]) -> FinanceState:
    return resync(FinanceState(
        income=float(data["income"]),
        categories=tuple(category_from_dict(c) for c in data["categories"]),
        expenses=tuple(expense_from_dict(e) for e in data["expenses"]),
        investments=tuple(investment_from_dict(i) for i in data["investments"]),
        invested=float(data.get("invested", 0.0)),
    ))


def initial_state(path: Union[str, Path] = SEED_PATH) -> FinanceState:
    return state_from_dict(load_seed(path))
