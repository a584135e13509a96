"""The ledger: sole owner of income, categories, expenses, investments and
savings.

Each mutation validates first, builds a complete new ``FinanceState`` from
the pure transforms, swaps it in with one assignment, then persists it and
notifies subscribers. A failing call raises a ``FinanceError`` before
anything is replaced, so callers never observe a half-applied change.
"""
import logging
from datetime import date as _date
from typing import Callable, Iterator, List, Optional, Tuple
from uuid import uuid4

from finai import transforms
from finai.catalog import BALANCED, CONSERVATIVE, AGGRESSIVE, PROFILE_BY_TIER, Catalog, InvestmentSuggestion, load_catalog
from finai.domain import BudgetSummary, Expense, FinanceState, Investment
from finai.errors import AuthenticationRequired, FinanceError, InsufficientFunds
from finai.events import (
    BUDGET_ALERT,
    CATEGORY_UPDATED,
    EXPENSE_RECORDED,
    INCOME_UPDATED,
    INVESTMENT_RECORDED,
    STATE_CHANGED,
    EventBus,
    register_default_handlers,
)
from finai.filters import ExpensePredicate
from finai.functional import Either, unwrap, validate_amount, validate_category_amount, require_category, validate_risk_tier
from finai.lazy import iter_expenses, lazy_top_categories
from finai.recommend import round_half_up
from finai.services import totals_calculator
from finai.storage import FINANCE_KEY, JsonStore, load_finance_state, save_finance_state

logger = logging.getLogger(__name__)

GOOD_SAVINGS_RATE = 15
FAIR_SAVINGS_RATE = 5

# advisor form preset: 30% of savings rounded to the nearest thousand, clamped
DEFAULT_INVEST_SHARE = 0.3
MIN_DEFAULT_INVESTMENT = 5000
MAX_DEFAULT_INVESTMENT = 50000


class Ledger:
    def __init__(
        self,
        state: Optional[FinanceState] = None,
        store: Optional[JsonStore] = None,
        store_key: str = FINANCE_KEY,
        bus: Optional[EventBus] = None,
        catalog: Optional[Catalog] = None,
    ):
        self._state = transforms.resync(state or transforms.initial_state())
        self._store = store
        self._store_key = store_key
        self._catalog = catalog or load_catalog()
        if bus is None:
            bus = EventBus()
            register_default_handlers(bus)
        self.bus = bus

    @classmethod
    def from_store(cls, store: JsonStore, store_key: str = FINANCE_KEY, **kwargs) -> "Ledger":
        """Build a ledger from the persisted record, falling back to seed defaults."""
        state = load_finance_state(store, store_key)
        return cls(state=state, store=store, store_key=store_key, **kwargs)

    @property
    def snapshot(self) -> FinanceState:
        return self._state

    @property
    def income(self) -> float:
        return self._state.income

    @property
    def savings(self) -> float:
        return self._state.savings

    def subscribe(self, name: str, handler: Callable) -> None:
        self.bus.subscribe(name, handler)

    def unsubscribe(self, name: str, handler: Callable) -> None:
        self.bus.unsubscribe(name, handler)

    # ── mutations ────────────────────────────────────────────────────────────

    def set_income(self, amount: float) -> FinanceState:
        amount = self._check(validate_amount(amount, allow_zero=True), "set_income")
        s = self._state
        new_state = transforms.resync(FinanceState(
            income=amount,
            categories=s.categories,
            expenses=s.expenses,
            investments=s.investments,
            invested=s.invested,
        ))
        logger.info("Income set to %.2f", amount)
        return self._commit(new_state, INCOME_UPDATED, {"income": amount})

    def record_expense(
        self,
        category: str,
        amount: float,
        description: str = "",
        date: Optional[str] = None,
    ) -> FinanceState:
        cat, amount = self._check(
            validate_category_amount(self._state.categories, category, amount), "record_expense"
        )
        expense = Expense(
            id=f"exp-{uuid4().hex}",
            category=cat.name,
            amount=amount,
            description=description,
            date=date or _date.today().isoformat(),
        )
        s = self._state
        new_state = transforms.resync(FinanceState(
            income=s.income,
            categories=transforms.add_to_category(s.categories, cat.name, amount),
            expenses=transforms.add_expense(s.expenses, expense),
            investments=s.investments,
            invested=s.invested,
        ))
        logger.info("Recorded expense %s: %.2f in %s", expense.id, amount, cat.name)
        return self._commit(new_state, EXPENSE_RECORDED, expense.to_dict(), category=cat.name)

    def quick_add_to_category(self, category: str, amount: float) -> FinanceState:
        cat, amount = self._check(
            validate_category_amount(self._state.categories, category, amount), "quick_add_to_category"
        )
        s = self._state
        new_state = transforms.resync(FinanceState(
            income=s.income,
            categories=transforms.add_to_category(s.categories, cat.name, amount),
            expenses=s.expenses,
            investments=s.investments,
            invested=s.invested,
        ))
        logger.info("Added %.2f to %s", amount, cat.name)
        return self._commit(new_state, category=cat.name)

    def adjust_category_limit(self, category: str, new_limit: float) -> FinanceState:
        new_limit = self._check(validate_amount(new_limit), "adjust_category_limit")
        cat = self._check(require_category(self._state.categories, category), "adjust_category_limit")
        s = self._state
        new_state = FinanceState(
            income=s.income,
            categories=transforms.update_category_limit(s.categories, cat.name, new_limit),
            expenses=s.expenses,
            investments=s.investments,
            invested=s.invested,
            savings=s.savings,
        )
        logger.info("Budget limit for %s set to %.2f", cat.name, new_limit)
        return self._commit(new_state, category=cat.name)

    def record_investment(self, amount: float, risk_tier: str) -> FinanceState:
        amount = self._check(validate_amount(amount), "record_investment")
        risk_tier = self._check(validate_risk_tier(risk_tier), "record_investment")
        s = self._state
        if amount > s.savings:
            err = InsufficientFunds(
                "You don't have enough savings for this investment.",
                amount=amount,
                savings=s.savings,
            )
            logger.warning("record_investment rejected: %s", err.message)
            raise err

        suggestion = self.representative_suggestion(risk_tier)
        investment = Investment(
            id=f"inv-{uuid4().hex}",
            name=suggestion.name,
            type=risk_tier,
            amount=amount,
            return_rate=suggestion.base_return,
            risk=risk_tier,
            description=suggestion.description,
        )
        new_state = transforms.resync(FinanceState(
            income=s.income,
            categories=s.categories,
            expenses=s.expenses,
            investments=transforms.add_investment(s.investments, investment),
            invested=s.invested + amount,
        ))
        logger.info("Invested %.2f in %s (%s risk)", amount, suggestion.name, risk_tier)
        return self._commit(new_state, INVESTMENT_RECORDED, investment.to_dict())

    def invest_savings(self, amount: float, risk_tier: str, authenticated: bool) -> FinanceState:
        if not authenticated:
            logger.warning("invest_savings rejected: no signed-in user")
            raise AuthenticationRequired("Please sign in to make investments.")
        return self.record_investment(amount, risk_tier)

    # ── derived figures ──────────────────────────────────────────────────────

    def savings_rate(self) -> float:
        return transforms.savings_rate(self._state.savings, self._state.income)

    def budget_summary(self) -> BudgetSummary:
        return BudgetSummary(**totals_calculator(self._state, {}))

    def budget_health(self) -> Tuple[str, str]:
        rate = self.savings_rate()
        if rate > GOOD_SAVINGS_RATE:
            return "good", f"You're saving {rate:.1f}% of your income. Great job!"
        if rate > FAIR_SAVINGS_RATE:
            return "fair", f"You're saving {rate:.1f}% of your income. Try to increase your savings rate."
        return "poor", f"You're only saving {rate:.1f}% of your income. Consider reducing expenses."

    def risk_profile(self) -> str:
        rate = self.savings_rate()
        savings = self._state.savings
        if rate < 10 or savings < 10000:
            return CONSERVATIVE
        if rate < 20 or savings < 25000:
            return BALANCED
        return AGGRESSIVE

    def suggested_investments(self) -> Tuple[str, Tuple[InvestmentSuggestion, ...]]:
        profile = self.risk_profile()
        return profile, self._catalog.suggestions_for(profile)

    def representative_suggestion(self, risk_tier: str) -> InvestmentSuggestion:
        profile = PROFILE_BY_TIER.get(risk_tier, BALANCED)
        suggestions = self._catalog.suggestions_for(profile) or self._catalog.suggestions_for(BALANCED)
        return suggestions[0]

    def default_investment_amount(self) -> int:
        rounded = round_half_up(self._state.savings * DEFAULT_INVEST_SHARE / 1000) * 1000
        return min(max(MIN_DEFAULT_INVESTMENT, rounded), MAX_DEFAULT_INVESTMENT)

    def expenses_where(self, pred: ExpensePredicate) -> Iterator[Expense]:
        return iter_expenses(self._state.expenses, pred)

    def top_categories(self, k: int = 3) -> List[Tuple[str, float]]:
        return list(lazy_top_categories(self._state.categories, k))

    # ── internals ────────────────────────────────────────────────────────────

    def _check(self, result: Either, operation: str):
        try:
            return unwrap(result)
        except FinanceError as e:
            logger.warning("%s rejected: %s", operation, e.message)
            raise

    def _publish_category(self, name: str) -> None:
        payload = self._state.category(name).to_dict()
        for result in self.bus.publish(CATEGORY_UPDATED, payload):
            if isinstance(result, dict) and "alert" in result:
                self.bus.publish(BUDGET_ALERT, result)

    def _commit(
        self,
        new_state: FinanceState,
        event: Optional[str] = None,
        payload: Optional[dict] = None,
        category: Optional[str] = None,
    ) -> FinanceState:
        self._state = new_state
        self._persist()
        if event:
            self.bus.publish(event, payload or {})
        if category:
            self._publish_category(category)
        self.bus.publish(STATE_CHANGED, {"state": new_state})
        return new_state

    def _persist(self) -> None:
        if self._store is None:
            return
        try:
            save_finance_state(self._store, self._state, self._store_key)
        except (OSError, TypeError, ValueError):
            # in-memory state stays authoritative for the session
            logger.warning("Could not persist finance state to %s", self._store.path, exc_info=True)
