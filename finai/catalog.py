"""Static reference data: investment companies, funds, strategies and the
quick investment suggestions shown per risk profile.

The catalog is read from ``data/catalog.json`` once per process and never
mutated. Declaration order is preserved everywhere because the engine's
"first match" tie-breaks depend on it.
"""
import json
from dataclasses import dataclass, asdict
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

from finai.domain import LOW, MEDIUM, HIGH

CATALOG_PATH = Path(__file__).parent / "data" / "catalog.json"

CONSERVATIVE = "conservative"
BALANCED = "balanced"
AGGRESSIVE = "aggressive"

PROFILE_BY_TIER = {LOW: CONSERVATIVE, MEDIUM: BALANCED, HIGH: AGGRESSIVE}


@dataclass(frozen=True)
class Company:
    id: str
    name: str
    description: str
    website: str
    fund_types: Tuple[str, ...]
    min_investment: float
    aum: Optional[float] = None  # crores
    established: Optional[int] = None
    rating: Optional[float] = None


@dataclass(frozen=True)
class FundReturns:
    one_year: Optional[float] = None
    three_year: Optional[float] = None
    five_year: Optional[float] = None


@dataclass(frozen=True)
class Fund:
    id: str
    company_id: str
    name: str
    type: str
    category: str
    risk: str
    returns: FundReturns
    min_investment: float
    expense_ratio: float
    description: str
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        d = asdict(self)
        d["tags"] = list(self.tags)
        return d


@dataclass(frozen=True)
class AllocationLine:
    type: str
    percentage: float
    description: str


@dataclass(frozen=True)
class Strategy:
    name: str
    description: str
    risk: str
    suitable_for: Tuple[str, ...]
    time_horizon: str
    expected_returns: str
    allocation: Tuple[AllocationLine, ...]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "risk": self.risk,
            "suitable_for": list(self.suitable_for),
            "time_horizon": self.time_horizon,
            "expected_returns": self.expected_returns,
            "allocation": [asdict(line) for line in self.allocation],
        }


@dataclass(frozen=True)
class InvestmentSuggestion:
    name: str
    return_rate: str  # band, e.g. "7-8%"
    risk: str
    description: str
    min_amount: float

    @property
    def base_return(self) -> float:
        """Lower bound of the return band as a number (``"7-8%"`` -> ``7.0``)."""
        return float(self.return_rate.rstrip("%").split("-")[0])


class Catalog:
    def __init__(self, companies, funds, strategies, suggestions):
        self.companies: Tuple[Company, ...] = tuple(companies)
        self.funds: Tuple[Fund, ...] = tuple(funds)
        self.strategies: Tuple[Strategy, ...] = tuple(strategies)
        self.suggestions: Dict[str, Tuple[InvestmentSuggestion, ...]] = {
            profile: tuple(items) for profile, items in suggestions.items()
        }
        self._companies_by_id = {c.id: c for c in self.companies}
        self._funds_by_id = {f.id: f for f in self.funds}
        self._strategies_by_name = {s.name: s for s in self.strategies}

    def company_by_id(self, company_id: str) -> Optional[Company]:
        return self._companies_by_id.get(company_id)

    def fund_by_id(self, fund_id: str) -> Optional[Fund]:
        return self._funds_by_id.get(fund_id)

    def strategy_by_name(self, name: str) -> Optional[Strategy]:
        return self._strategies_by_name.get(name)

    def funds_with_risk(self, risk: str) -> Tuple[Fund, ...]:
        return tuple(f for f in self.funds if f.risk == risk)

    def suggestions_for(self, profile: str) -> Tuple[InvestmentSuggestion, ...]:
        return self.suggestions.get(profile, ())


def _company(d: dict) -> Company:
    return Company(**{**d, "fund_types": tuple(d["fund_types"])})


def _fund(d: dict) -> Fund:
    return Fund(**{
        **d,
        "returns": FundReturns(**d.get("returns", {})),
        "tags": tuple(d.get("tags", ())),
    })


def _strategy(d: dict) -> Strategy:
    return Strategy(**{
        **d,
        "suitable_for": tuple(d["suitable_for"]),
        "allocation": tuple(AllocationLine(**line) for line in d["allocation"]),
    })


@lru_cache(maxsize=None)
def load_catalog(path: str = str(CATALOG_PATH)) -> Catalog:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return Catalog(
        companies=(_company(c) for c in data["companies"]),
        funds=(_fund(fd) for fd in data["funds"]),
        strategies=(_strategy(s) for s in data["strategies"]),
        suggestions={
            profile: (InvestmentSuggestion(**s) for s in items)
            for profile, items in data["suggestions"].items()
        },
    )
