from typing import Callable

from finai.domain import Expense

ExpensePredicate = Callable[[Expense], bool]


def by_category(name: str) -> ExpensePredicate:
    def _filter(e: Expense) -> bool:
        return e.category == name

    return _filter


def by_date_range(start: str, end: str) -> ExpensePredicate:
    def _filter(e: Expense) -> bool:
        return start <= e.date <= end

    return _filter


def by_amount_range(min: float, max: float) -> ExpensePredicate:
    def _filter(e: Expense) -> bool:
        return min <= e.amount <= max

    return _filter


def all_of(*preds: ExpensePredicate) -> ExpensePredicate:
    def _filter(e: Expense) -> bool:
        return all(p(e) for p in preds)

    return _filter
