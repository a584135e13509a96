"""Investment recommendation engine.

``recommend(monthly_savings, age, risk_tolerance, goals)`` turns a savings
figure and an investor profile into fund picks, a strategy with per-line
amounts, optional tax-saving advice, age-banded allocation guidance and a
ten-year projected value. Pure and deterministic: the same arguments always
give an equal ``Recommendation``.
"""
import math
from dataclasses import dataclass, asdict
from typing import Iterable, Optional, Tuple

from finai.catalog import Catalog, Fund, Strategy, load_catalog
from finai.domain import LOW, MEDIUM, HIGH
from finai.functional import unwrap, validate_amount, validate_risk_tier

MAX_RECOMMENDED_FUNDS = 5
BROADEN_FROM_MEDIUM = 3          # low / high tolerance
BROADEN_FROM_EACH_SIDE = 2       # medium tolerance, taken from low and from high
INVESTABLE_SHARE = 0.70          # share of monthly savings suggested for investing
DEFAULT_STRATEGY = "Moderate Balanced"

TAX_SAVING_GOAL = "tax-saving"
TAX_SAVER_SHARE = 0.25
# Section 80C: Rs 1.5L deduction per year, 31.2% top slab incl. cess
SECTION_80C_LIMIT = 150000
TOP_TAX_RATE = 0.312
MAX_MONTHLY_TAX_SAVER = 12500
MAX_ANNUAL_TAX_SAVING = 46800

PROJECTION_YEARS = 10
ANNUAL_RETURN_BY_TIER = {LOW: 0.07, MEDIUM: 0.11, HIGH: 0.15}

# one-year scenarios shown beside an invest amount
CONSERVATIVE_SCENARIO_RATE = 0.06
AVERAGE_RATE_BY_TIER = {LOW: 0.07, MEDIUM: 0.11, HIGH: 0.16}
OPTIMISTIC_RATE_BY_TIER = {LOW: 0.08, MEDIUM: 0.13, HIGH: 0.20}

# (upper age bound, message, {tier: (equity, debt, other)})
AGE_BRACKETS = (
    (30, "You have a long investment horizon. Focus on building wealth through equity investments.",
     {LOW: (60, 30, 10), MEDIUM: (75, 20, 5), HIGH: (85, 10, 5)}),
    (45, "Balance growth with some stability as you approach your peak earning years.",
     {LOW: (50, 40, 10), MEDIUM: (65, 25, 10), HIGH: (75, 15, 10)}),
    (60, "Begin transitioning to more conservative investments as retirement approaches.",
     {LOW: (30, 60, 10), MEDIUM: (45, 45, 10), HIGH: (60, 30, 10)}),
    (None, "Focus on income generation and capital preservation in retirement.",
     {LOW: (20, 70, 10), MEDIUM: (30, 60, 10), HIGH: (40, 50, 10)}),
)


@dataclass(frozen=True)
class AllocationAmount:
    type: str
    percentage: float
    description: str
    monthly_amount: int
    annual_amount: int


@dataclass(frozen=True)
class TaxSavingRecommendation:
    fund: Fund
    suggested_monthly_investment: float
    annual_tax_saving: float

    def to_dict(self) -> dict:
        return {
            **self.fund.to_dict(),
            "suggested_monthly_investment": self.suggested_monthly_investment,
            "annual_tax_saving": self.annual_tax_saving,
        }


@dataclass(frozen=True)
class AgeBasedAdvice:
    message: str
    equity: int
    debt: int
    other: int


@dataclass(frozen=True)
class Recommendation:
    recommended_funds: Tuple[Fund, ...]
    recommended_strategy: Strategy
    suggested_monthly_investment: float
    specific_allocation: Tuple[AllocationAmount, ...]
    tax_saving_recommendation: Optional[TaxSavingRecommendation]
    age_based_advice: AgeBasedAdvice
    annual_return_rate: float
    projection_years: int
    projected_value: float

    def to_dict(self) -> dict:
        tax = self.tax_saving_recommendation
        return {
            "recommended_funds": [f.to_dict() for f in self.recommended_funds],
            "recommended_strategy": self.recommended_strategy.to_dict(),
            "suggested_monthly_investment": self.suggested_monthly_investment,
            "specific_allocation": [asdict(a) for a in self.specific_allocation],
            "tax_saving_recommendation": tax.to_dict() if tax else None,
            "age_based_advice": asdict(self.age_based_advice),
            "annual_return_rate": self.annual_return_rate,
            "projection_years": self.projection_years,
            "projected_value": self.projected_value,
        }


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _ranking_return(fund: Fund) -> Optional[float]:
    if fund.returns.three_year is not None:
        return fund.returns.three_year
    return fund.returns.one_year


def select_funds(catalog: Catalog, risk: str) -> Tuple[Fund, ...]:
    candidates = list(catalog.funds_with_risk(risk))

    if len(candidates) < MAX_RECOMMENDED_FUNDS:
        if risk in (LOW, HIGH):
            candidates += catalog.funds_with_risk(MEDIUM)[:BROADEN_FROM_MEDIUM]
        else:
            candidates += catalog.funds_with_risk(LOW)[:BROADEN_FROM_EACH_SIDE]
            candidates += catalog.funds_with_risk(HIGH)[:BROADEN_FROM_EACH_SIDE]

    # stable: equal returns and unrated funds keep catalog order
    def key(fund: Fund):
        r = _ranking_return(fund)
        return (0, 0.0) if r is None else (1, r)

    ranked = sorted(candidates, key=key, reverse=True)
    return tuple(ranked[:MAX_RECOMMENDED_FUNDS])


def select_strategy(catalog: Catalog, risk: str) -> Strategy:
    for strategy in catalog.strategies:
        if strategy.risk == risk:
            return strategy
    return catalog.strategy_by_name(DEFAULT_STRATEGY)


def allocate(strategy: Strategy, monthly_investment: float) -> Tuple[AllocationAmount, ...]:
    lines = []
    for line in strategy.allocation:
        monthly = round_half_up(line.percentage / 100 * monthly_investment)
        lines.append(AllocationAmount(
            type=line.type,
            percentage=line.percentage,
            description=line.description,
            monthly_amount=monthly,
            annual_amount=monthly * 12,
        ))
    return tuple(lines)


def tax_saving_advice(catalog: Catalog, monthly_investment: float) -> Optional[TaxSavingRecommendation]:
    for fund in catalog.funds:
        if fund.type == TAX_SAVING_GOAL or TAX_SAVING_GOAL in fund.tags:
            return TaxSavingRecommendation(
                fund=fund,
                suggested_monthly_investment=min(MAX_MONTHLY_TAX_SAVER, TAX_SAVER_SHARE * monthly_investment),
                annual_tax_saving=min(MAX_ANNUAL_TAX_SAVING, TOP_TAX_RATE * SECTION_80C_LIMIT),
            )
    return None


def age_based_advice(age: int, risk: str) -> AgeBasedAdvice:
    for upper, message, table in AGE_BRACKETS:
        if upper is None or age < upper:
            equity, debt, other = table[risk]
            return AgeBasedAdvice(message=message, equity=equity, debt=debt, other=other)
    raise AssertionError("age brackets must end with an open bracket")


def future_value(monthly: float, annual_rate: float, years: int = PROJECTION_YEARS) -> float:
    """Future value of a monthly annuity with monthly compounding."""
    n = years * 12
    r = annual_rate / 12
    if r == 0:
        return monthly * n
    return monthly * ((1 + r) ** n - 1) / r


def annual_return_scenarios(amount: float, risk: str) -> dict:
    """One-year return of ``amount`` under conservative / average / optimistic rates."""
    risk = unwrap(validate_risk_tier(risk))
    return {
        "conservative": amount * CONSERVATIVE_SCENARIO_RATE,
        "average": amount * AVERAGE_RATE_BY_TIER[risk],
        "optimistic": amount * OPTIMISTIC_RATE_BY_TIER[risk],
    }


def recommend(
    monthly_savings: float,
    age: int = 30,
    risk_tolerance: str = MEDIUM,
    goals: Iterable[str] = ("wealth-creation",),
    catalog: Optional[Catalog] = None,
) -> Recommendation:
    risk = unwrap(validate_risk_tier(risk_tolerance))
    savings = unwrap(validate_amount(monthly_savings, allow_zero=True))
    catalog = catalog or load_catalog()
    goals = frozenset(goals)

    strategy = select_strategy(catalog, risk)
    monthly_investment = INVESTABLE_SHARE * savings
    annual_rate = ANNUAL_RETURN_BY_TIER[risk]

    tax = None
    if TAX_SAVING_GOAL in goals:
        tax = tax_saving_advice(catalog, monthly_investment)

    return Recommendation(
        recommended_funds=select_funds(catalog, risk),
        recommended_strategy=strategy,
        suggested_monthly_investment=monthly_investment,
        specific_allocation=allocate(strategy, monthly_investment),
        tax_saving_recommendation=tax,
        age_based_advice=age_based_advice(age, risk),
        annual_return_rate=annual_rate,
        projection_years=PROJECTION_YEARS,
        projected_value=future_value(monthly_investment, annual_rate),
    )
