import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from finai.catalog import load_catalog
from finai.config import load_config
from finai.domain import RISK_TIERS
from finai.errors import FinanceError
from finai.events import BUDGET_ALERT
from finai.frames import (
    allocation_frame,
    categories_frame,
    expenses_frame,
    investments_frame,
    monthly_expenses,
    projection_frame,
)
from finai.ledger import Ledger
from finai.recommend import annual_return_scenarios, recommend
from finai.services import default_budget_service
from finai.session import SessionStore
from finai.storage import JsonStore
from finai.utils.logging import configure_logging

st.set_page_config(page_title="FINAI", layout="wide")

GOALS = {
    "wealth-creation": "Wealth creation",
    "retirement": "Retirement",
    "tax-saving": "Tax saving",
    "child-education": "Child education",
    "home-purchase": "Home purchase",
}


def on_budget_alert(event, payload):
    st.session_state.alerts.append(payload["alert"])
    return payload


if "ledger" not in st.session_state:
    config = load_config()
    configure_logging(config.logging)
    store = JsonStore(config.storage.path)
    st.session_state.config = config
    st.session_state.alerts = []
    st.session_state.ledger = Ledger.from_store(store, config.storage.finance_key)
    st.session_state.ledger.subscribe(BUDGET_ALERT, on_budget_alert)
    st.session_state.session = SessionStore(store, config.storage.users_key, config.storage.auth_key)

config = st.session_state.config
ledger: Ledger = st.session_state.ledger
session: SessionStore = st.session_state.session
catalog = load_catalog()


def run(action, success: str):
    try:
        action()
    except FinanceError as e:
        st.error(e.message)
        return False
    st.success(success)
    return True


# ── sidebar: account ─────────────────────────────────────────────────────────

st.sidebar.markdown("### 👤 Account")
user = session.current_user()
if user:
    st.sidebar.caption(f"Signed in as {user.name}")
    if st.sidebar.button("Sign out"):
        session.sign_out()
        st.rerun()
else:
    mode = st.sidebar.radio("Mode", ["Sign in", "Sign up"], horizontal=True)
    with st.sidebar.form("auth"):
        name = st.text_input("Name") if mode == "Sign up" else ""
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        if st.form_submit_button(mode):
            if mode == "Sign up":
                ok = run(lambda: session.sign_up(name, email, password), f"Welcome to FINAI, {name}!")
            else:
                ok = run(lambda: session.sign_in(email, password), "Successfully signed in")
            if ok:
                st.rerun()

menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "💰 Budget", "📈 Advisor", "🏦 Investments"])

state = ledger.snapshot

for alert in st.session_state.alerts:
    st.warning(alert)
st.session_state.alerts = []

if menu == "🏠 Dashboard":
    st.title("🏠 Dashboard")
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Monthly Income", f"₹{state.income:,.0f}")
    with k2:
        st.metric("Spent", f"₹{ledger.budget_summary().total_spent:,.0f}")
    with k3:
        st.metric("Savings", f"₹{state.savings:,.0f}")
    with k4:
        st.metric("Savings Rate", f"{ledger.savings_rate():.1f}%")

    cats = categories_frame(state)
    fig_cat = px.pie(cats, values="amount", names="name", title="Spending by Category")
    st.plotly_chart(fig_cat, use_container_width=True)

    monthly = monthly_expenses(state)
    if not monthly.empty:
        fig_ts = go.Figure()
        fig_ts.add_trace(go.Scatter(x=monthly.index, y=monthly.values, mode="lines+markers", name="Expenses"))
        fig_ts.update_layout(margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig_ts, use_container_width=True)

    st.subheader("Recent Expenses")
    df = expenses_frame(state)
    if df.empty:
        st.info("No expenses recorded yet.")
    else:
        recent = df.sort_values("date", ascending=False).head(8).copy()
        recent["date"] = recent["date"].dt.strftime("%Y-%m-%d").fillna("-")
        recent["amount"] = recent["amount"].map(lambda x: f"₹{x:,.0f}")
        st.table(recent[["date", "category", "amount", "description"]].reset_index(drop=True))

elif menu == "💰 Budget":
    st.title("💰 Budget Tracker")
    summary = ledger.budget_summary()
    c1, c2, c3 = st.columns(3)
    c1.metric("Total Budget", f"₹{summary.total_budget:,.0f}")
    c2.metric("Spent", f"₹{summary.total_spent:,.0f}")
    c3.metric("Remaining", f"₹{summary.remaining:,.0f}")
    st.progress(min(100.0, summary.used_percentage) / 100, text=f"Budget used {summary.used_percentage:.1f}%")

    status, message = ledger.budget_health()
    {"good": st.success, "fair": st.warning, "poor": st.error}[status](message)

    names = [c.name for c in state.categories]
    col_inc, col_exp, col_lim = st.columns(3)
    with col_inc.form("income"):
        income = st.number_input("Monthly income (₹)", min_value=0.0, value=float(state.income), step=1000.0)
        if st.form_submit_button("Update income"):
            run(lambda: ledger.set_income(income), f"Your monthly income has been set to ₹{income:,.0f}.")
    with col_exp.form("expense"):
        category = st.selectbox("Category", names)
        amount = st.number_input("Amount (₹)", min_value=0.0, step=100.0)
        description = st.text_input("Description")
        day = st.date_input("Date")
        if st.form_submit_button("Add expense"):
            run(lambda: ledger.record_expense(category, amount, description, day.isoformat()),
                f"Added ₹{amount:,.0f} to {category}.")
    with col_lim.form("limit"):
        category = st.selectbox("Category", names, key="limit_category")
        limit = st.number_input("New limit (₹)", min_value=0.0, step=500.0)
        if st.form_submit_button("Adjust budget"):
            run(lambda: ledger.adjust_category_limit(category, limit),
                f"{category} budget limit updated to ₹{limit:,.0f}.")

    st.subheader("Categories")
    for cat in state.categories:
        left, right = st.columns([4, 1])
        with left:
            st.metric(cat.name, f"₹{cat.amount:,.0f} / ₹{cat.limit:,.0f}")
            st.progress(min(100.0, cat.percentage) / 100)
        with right:
            quick = st.number_input("Quick add", min_value=0.0, value=10.0, step=10.0, key=f"quick_{cat.name}")
            if st.button("Add", key=f"add_{cat.name}"):
                if run(lambda: ledger.quick_add_to_category(cat.name, quick), f"Added ₹{quick:,.0f} to {cat.name}."):
                    st.rerun()

    report = default_budget_service().monthly_report(state)
    for check in report["validation"]:
        for msg in check["messages"]:
            st.warning(msg)

elif menu == "📈 Advisor":
    st.title("📈 Investment Advisor")
    advisor = config.advisor
    with st.form("advisor"):
        age = st.slider("Age", 18, 90, advisor.default_age)
        risk = st.radio("Risk tolerance", RISK_TIERS, index=RISK_TIERS.index(advisor.default_risk), horizontal=True)
        goals = st.multiselect("Goals", list(GOALS), default=advisor.default_goals, format_func=GOALS.get)
        amount = st.slider("Monthly amount to plan (₹)", 1000, max(50000, int(state.savings)),
                           ledger.default_investment_amount(), step=1000)
        submitted = st.form_submit_button("Get recommendations")

    if submitted:
        st.session_state.recommendation = (recommend(amount, age, risk, goals), risk)

    if "recommendation" in st.session_state:
        rec, risk = st.session_state.recommendation
        strategy = rec.recommended_strategy
        k1, k2, k3 = st.columns(3)
        k1.metric("Suggested monthly investment", f"₹{rec.suggested_monthly_investment:,.0f}")
        k2.metric("Strategy", strategy.name, strategy.expected_returns)
        k3.metric(f"Projected value ({rec.projection_years}y)", f"₹{rec.projected_value:,.0f}",
                  f"{rec.annual_return_rate:.0%} annualized")

        alloc = allocation_frame(rec)
        st.plotly_chart(px.pie(alloc, values="percentage", names="type", title=strategy.name), use_container_width=True)
        st.table(alloc)

        proj = projection_frame(rec)
        fig = go.Figure()
        fig.add_trace(go.Scatter(x=proj["year"], y=proj["invested"], name="Invested"))
        fig.add_trace(go.Scatter(x=proj["year"], y=proj["value"], name="Projected value"))
        st.plotly_chart(fig, use_container_width=True)

        advice = rec.age_based_advice
        st.info(f"{advice.message} Equity {advice.equity}% · Debt {advice.debt}% · Other {advice.other}%")

        if rec.tax_saving_recommendation:
            tax = rec.tax_saving_recommendation
            st.success(
                f"Tax saving: invest ₹{tax.suggested_monthly_investment:,.0f}/month in {tax.fund.name}, "
                f"saving up to ₹{tax.annual_tax_saving:,.0f} a year under Section 80C."
            )

        st.subheader("Recommended Funds")
        rows = []
        for fund in rec.recommended_funds:
            company = catalog.company_by_id(fund.company_id)
            rows.append({
                "Fund": fund.name,
                "Company": company.name if company else fund.company_id,
                "Category": fund.category,
                "Risk": fund.risk,
                "3Y return %": fund.returns.three_year,
                "Expense ratio %": fund.expense_ratio,
                "Min investment": fund.min_investment,
            })
        st.dataframe(pd.DataFrame(rows), use_container_width=True)

        if st.button(f"Invest ₹{rec.suggested_monthly_investment:,.0f} now"):
            run(lambda: ledger.invest_savings(rec.suggested_monthly_investment, risk, session.is_signed_in()),
                f"You've invested ₹{rec.suggested_monthly_investment:,.0f} in a {risk} risk investment.")

elif menu == "🏦 Investments":
    st.title("🏦 Investments")
    profile, suggestions = ledger.suggested_investments()
    st.caption(f"Suggested profile from your savings: **{profile}**")
    for s in suggestions:
        st.markdown(f"**{s.name}** · {s.return_rate} · min ₹{s.min_amount:,.0f}  \n{s.description}")

    with st.form("invest"):
        risk = st.radio("Risk level", RISK_TIERS, index=1, horizontal=True)
        amount = st.number_input("Amount (₹)", min_value=0.0, value=500.0, step=500.0)
        st.caption(f"Available savings: ₹{state.savings:,.0f}")
        scenarios = annual_return_scenarios(amount, risk)
        s1, s2, s3 = st.columns(3)
        s1.metric("Conservative", f"₹{scenarios['conservative']:,.0f}")
        s2.metric("Average", f"₹{scenarios['average']:,.0f}")
        s3.metric("Optimistic", f"₹{scenarios['optimistic']:,.0f}")
        if st.form_submit_button("Invest"):
            run(lambda: ledger.invest_savings(amount, risk, session.is_signed_in()),
                f"You've invested ₹{amount:,.0f} in a {risk} risk investment.")

    inv = investments_frame(ledger.snapshot)
    st.dataframe(inv.drop(columns=["id"]), use_container_width=True)
    csv = inv.to_csv(index=False)
    st.download_button("⬇ Download CSV", csv, file_name="investments.csv")
