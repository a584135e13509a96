"""pandas views over ledger snapshots and recommendations for the dashboard."""
import numpy as np
import pandas as pd

from finai.domain import FinanceState
from finai.recommend import Recommendation

EXPENSE_COLUMNS = ["id", "date", "category", "amount", "description"]


def expenses_frame(state: FinanceState) -> pd.DataFrame:
    if not state.expenses:
        return pd.DataFrame(columns=EXPENSE_COLUMNS)
    df = pd.DataFrame([e.to_dict() for e in state.expenses], columns=EXPENSE_COLUMNS)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    return df


def categories_frame(state: FinanceState) -> pd.DataFrame:
    df = pd.DataFrame(
        [c.to_dict() for c in state.categories],
        columns=["name", "limit", "amount", "percentage"],
    )
    df["remaining"] = df["limit"] - df["amount"]
    return df


def investments_frame(state: FinanceState) -> pd.DataFrame:
    return pd.DataFrame(
        [i.to_dict() for i in state.investments],
        columns=["id", "name", "type", "amount", "return_rate", "risk", "description"],
    )


def monthly_expenses(state: FinanceState) -> pd.Series:
    """Total logged expense per calendar month (``YYYY-MM`` index)."""
    df = expenses_frame(state)
    if df.empty or df["date"].isna().all():
        return pd.Series(dtype=float)
    df = df.dropna(subset=["date"])
    return df.groupby(df["date"].dt.strftime("%Y-%m"))["amount"].sum()


def allocation_frame(rec: Recommendation) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "type": a.type,
                "percentage": a.percentage,
                "monthly_amount": a.monthly_amount,
                "annual_amount": a.annual_amount,
            }
            for a in rec.specific_allocation
        ]
    )


def projection_frame(rec: Recommendation) -> pd.DataFrame:
    """Year-end value of the suggested monthly investment over the projection horizon."""
    years = np.arange(0, rec.projection_years + 1)
    r = rec.annual_return_rate / 12
    months = years * 12
    p = rec.suggested_monthly_investment
    if r == 0:
        values = p * months
    else:
        values = p * ((1 + r) ** months - 1) / r
    return pd.DataFrame({
        "year": years,
        "invested": p * months,
        "value": values,
    })
