import pytest

from finai.frames import (
    EXPENSE_COLUMNS,
    allocation_frame,
    categories_frame,
    expenses_frame,
    investments_frame,
    monthly_expenses,
    projection_frame,
)
from finai.ledger import Ledger
from finai.recommend import recommend


def test_empty_expenses_frame():
    df = expenses_frame(Ledger().snapshot)
    assert df.empty
    assert list(df.columns) == EXPENSE_COLUMNS


def test_monthly_expenses(ledger):
    ledger.record_expense("Food", 100, date="2025-01-05")
    ledger.record_expense("Food", 50, date="2025-01-20")
    ledger.record_expense("Transport", 30, date="2025-02-01")

    monthly = monthly_expenses(ledger.snapshot)
    assert monthly.to_dict() == {"2025-01": 150, "2025-02": 30}


def test_monthly_expenses_empty():
    assert monthly_expenses(Ledger().snapshot).empty


def test_categories_frame_remaining():
    df = categories_frame(Ledger().snapshot)

    assert len(df) == 6
    housing = df[df["name"] == "Housing"].iloc[0]
    assert housing["remaining"] == 7000
    assert housing["percentage"] == pytest.approx(72)


def test_investments_frame():
    df = investments_frame(Ledger().snapshot)
    assert df["amount"].sum() == 75000
    assert list(df["risk"]) == ["medium", "low"]


def test_allocation_frame():
    df = allocation_frame(recommend(10000, 25, "high"))
    assert df["monthly_amount"].tolist() == [2100, 1750, 1400, 1050, 700]


def test_projection_frame_matches_recommendation():
    rec = recommend(10000, 25, "high")
    df = projection_frame(rec)

    assert len(df) == rec.projection_years + 1
    assert df["value"].iloc[0] == 0
    assert df["value"].iloc[-1] == pytest.approx(rec.projected_value)
    assert df["invested"].iloc[-1] == pytest.approx(7000 * 120)
