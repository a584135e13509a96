import logging
from typing import Callable, Dict, Any, Sequence

from finai.domain import FinanceState
from finai.lazy import over_budget
from finai.transforms import total_budget, total_spent, savings_rate

logger = logging.getLogger(__name__)


class BudgetService:
    """Facade for budget-related reports using injected validators and calculators.

    validators: sequence of functions taking (state) -> Sequence[str]
    calculators: sequence of functions taking (state, acc) -> dict (partial results)
    """

    def __init__(self, validators: Sequence[Callable[..., Sequence[str]]], calculators: Sequence[Callable[..., Dict[str, Any]]]):
        self.validators = validators
        self.calculators = calculators

    def monthly_report(self, state: FinanceState) -> Dict[str, Any]:
        """Run validators and calculators and return an aggregated report with intermediate steps."""
        report = {
            "validation": [],
            "steps": [],
            "result": {}
        }

        for v in self.validators:
            try:
                msgs = v(state)
            except Exception as e:
                logger.exception("Validator %s failed", getattr(v, "__name__", v))
                msgs = [f"validator_error: {e}"]
            report["validation"].append({"validator": getattr(v, "__name__", str(v)), "messages": list(msgs)})

        # calculators run in order and may read earlier outputs from acc
        acc = {}
        for calc in self.calculators:
            out = calc(state, acc)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        return report


def over_budget_validator(state: FinanceState) -> Sequence[str]:
    return [
        f"{c.name} is over budget: ₹{c.amount:,.0f} of ₹{c.limit:,.0f} ({c.percentage:.1f}%)"
        for c in over_budget(state.categories)
    ]


def negative_savings_validator(state: FinanceState) -> Sequence[str]:
    if state.savings < 0:
        return [f"Spending exceeds income by ₹{-state.savings:,.0f}"]
    return []


def totals_calculator(state: FinanceState, acc: Dict[str, Any]) -> Dict[str, Any]:
    spent = total_spent(state.categories)
    budget = total_budget(state.categories)
    return {
        "total_spent": spent,
        "total_budget": budget,
        "remaining": budget - spent,
        "used_percentage": spent / budget * 100 if budget else 0.0,
    }


def savings_calculator(state: FinanceState, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "income": state.income,
        "savings": state.savings,
        "savings_rate": savings_rate(state.savings, state.income),
    }


def investments_calculator(state: FinanceState, acc: Dict[str, Any]) -> Dict[str, Any]:
    invested = sum(i.amount for i in state.investments)
    annual = sum(i.amount * i.return_rate / 100 for i in state.investments)
    return {"portfolio_value": invested, "expected_annual_return": annual}


def default_budget_service() -> BudgetService:
    return BudgetService(
        validators=(over_budget_validator, negative_savings_validator),
        calculators=(totals_calculator, savings_calculator, investments_calculator),
    )
