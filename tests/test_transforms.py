from finai.domain import Category, Expense, Investment, FinanceState
from finai.transforms import (
    add_expense,
    add_investment,
    add_to_category,
    derive_savings,
    initial_state,
    load_seed,
    resync,
    savings_rate,
    state_from_dict,
    total_budget,
    total_spent,
    update_category_limit,
)


def make_categories():
    return (
        Category("Food", 10000, 8000),
        Category("Transport", 6000, 1500),
    )


def test_add_expense():
    e1 = Expense("exp-1", "Food", 250, "Groceries", "2025-09-01")
    e2 = Expense("exp-2", "Transport", 90, "Bus pass", "2025-09-02")

    expenses = (e1,)
    new_expenses = add_expense(expenses, e2)

    assert len(new_expenses) == 2
    assert expenses != new_expenses
    assert len(expenses) == 1


def test_add_investment_appends():
    inv = Investment("inv-9", "PPF", "low", 500, 7.0, "low")
    assert add_investment((), inv) == (inv,)


def test_add_to_category_updates_amount_and_percentage():
    cats = make_categories()
    new_cats = add_to_category(cats, "Food", 1000)

    assert new_cats[0].amount == 9000
    assert new_cats[0].percentage == 90
    assert new_cats[1] == cats[1]
    assert cats[0].amount == 8000


def test_update_category_limit_keeps_amount():
    cats = make_categories()
    new_cats = update_category_limit(cats, "Transport", 3000)

    assert new_cats[1].limit == 3000
    assert new_cats[1].amount == 1500
    assert new_cats[1].percentage == 50
    assert cats[1].limit == 6000


def test_zero_limit_percentage_is_zero():
    assert Category("Gifts", 0, 100).percentage == 0.0


def test_totals_and_savings():
    cats = make_categories()
    assert total_spent(cats) == 9500
    assert total_budget(cats) == 16000
    assert derive_savings(20000, cats) == 10500
    assert derive_savings(20000, cats, invested=500) == 10000


def test_savings_rate_zero_income():
    assert savings_rate(100, 0) == 0.0
    assert savings_rate(250, 1000) == 25.0


def test_load_seed():
    seed = load_seed()

    assert seed["income"] == 80000
    assert len(seed["categories"]) == 6
    assert len(seed["investments"]) == 2
    assert seed["expenses"] == []


def test_initial_state_derives_savings():
    state = initial_state()

    assert state.income == 80000
    assert total_spent(state.categories) == 41500
    assert state.savings == 38500


def test_state_from_dict_ignores_stored_percentage():
    state = state_from_dict({
        "income": 1000,
        "categories": [{"name": "Food", "limit": 200, "amount": 50, "percentage": 99}],
        "expenses": [],
        "investments": [{"id": "inv-1", "name": "FD", "type": "savings", "amount": 10,
                         "returnRate": 6.5, "risk": "low"}],
    })

    assert state.categories[0].percentage == 25
    assert state.investments[0].return_rate == 6.5
    assert state.savings == 950


def test_resync_fixes_stale_savings():
    stale = FinanceState(income=100, categories=(Category("A", 50, 30),), savings=999)
    assert resync(stale).savings == 70
