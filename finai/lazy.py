from typing import Callable, Iterable, Iterator, Tuple

from finai.domain import Category, Expense


def iter_expenses(
    expenses: Tuple[Expense, ...], pred: Callable[[Expense], bool]
) -> Iterator[Expense]:
    for e in expenses:
        if pred(e):
            yield e


def lazy_top_categories(
    cats: Iterable[Category], k: int
) -> Iterator[Tuple[str, float]]:
    """Yield ``(name, amount)`` for the ``k`` categories with the most spending."""
    ordered = sorted(
        ((c.name, c.amount) for c in cats),
        key=lambda item: item[1],
        reverse=True,
    )

    for name, total in ordered[: max(0, k)]:
        yield name, total


def over_budget(cats: Iterable[Category]) -> Iterator[Category]:
    for c in cats:
        if c.limit > 0 and c.amount > c.limit:
            yield c
