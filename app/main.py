import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
from datetime import date

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from budgetwatch.aggregator import aggregate, expenses_by_month, monthly_overview
from budgetwatch.config import configure_logging
from budgetwatch.container import build_container
from budgetwatch.dates import current_month, month_key, parse_month, recent_months
from budgetwatch.domain import AlertLevel, TransactionType
from budgetwatch.events import BUDGET_ALERT, Event
from budgetwatch.exceptions import BudgetWatchError
from budgetwatch.thresholds import as_limit, format_money

st.set_page_config(page_title="Budget Watch", layout="wide")
configure_logging()

LEVEL_ICONS = {
    AlertLevel.WARNING: "🟡",
    AlertLevel.CRITICAL: "🟠",
    AlertLevel.EXCEEDED: "🔴",
}


def run(coro):
    return asyncio.run(coro)


def toast_alert(event: Event, payload: dict) -> dict:
    icon = "🔴" if payload["severity"] == "error" else "⚠️"
    st.toast(payload["message"], icon=icon)
    st.session_state.alert_log.append({"time": event.ts[:19], **payload})
    return {"shown": True}


if "container" not in st.session_state:
    st.session_state.container = build_container()
    st.session_state.alert_log = []
    st.session_state.container.bus.subscribe(BUDGET_ALERT, toast_alert)

c = st.session_state.container


async def record_transaction(data: dict):
    tx = await c.transactions.create(data)
    await c.alerts.drain()
    return tx


def tx_to_df(tx_list):
    rows = [
        {
            "date": pd.to_datetime(t.date),
            "type": t.type.value,
            "amount": t.amount,
            "category": t.category,
            "description": t.description,
        }
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["date", "type", "amount", "category", "description"])


month = st.sidebar.text_input("Month (YYYY-MM)", value=st.session_state.get("month", current_month()))
st.session_state["month"] = month
if parse_month(month) is None:
    st.error(f"❌ Invalid month: {month}")
    st.stop()

menu = st.sidebar.radio("Menu", ["🏠 Overview", "🧾 Transactions", "💰 Budgets", "📑 Reports"])

transactions = run(c.transactions.get_all())
budget = run(c.budgets.get_for_month(month))

if menu == "🏠 Overview":
    st.title("🏠 Overview")
    overview = monthly_overview(transactions, month, budget)
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Income", f"${format_money(overview.income)}")
    with k2:
        st.metric("Expenses", f"${format_money(overview.expenses)}")
    with k3:
        st.metric("Net", f"${format_money(overview.net)}")
    with k4:
        st.metric(
            "Remaining Budget",
            f"${format_money(overview.remaining_budget)}",
            "Under budget" if overview.remaining_budget >= 0 else "Over budget",
        )

    alerts = run(c.alerts.calculate_budget_alerts(month))
    summary = alerts.summary
    if summary.total_alerts > 0:
        st.subheader(f"⚠️ Budget Alerts ({summary.total_alerts} active alert{'s' if summary.total_alerts != 1 else ''})")
        a1, a2, a3 = st.columns(3)
        with a1:
            st.metric("Budget Exceeded", summary.exceeded)
        with a2:
            st.metric("Critical Alerts", summary.critical)
        with a3:
            st.metric("Warning Alerts", summary.warning)
        for alert in sorted(alerts.all_alerts, key=lambda a: a.level, reverse=True):
            line = f"{LEVEL_ICONS[alert.level]} {alert.message}"
            if alert.level == AlertLevel.EXCEEDED:
                st.error(line)
            else:
                st.warning(line)
    elif budget is None:
        st.info(f"No budget configured for {month}")
    else:
        st.success("All categories are within budget")

    spend = aggregate(transactions, month)
    if spend.per_category:
        df_spend = pd.DataFrame(
            [{"Category": k, "Spent": v} for k, v in spend.per_category.items()]
        )
        fig_cat = px.pie(df_spend, values="Spent", names="Category", title="Expenses by Category")
        fig_cat.update_layout(height=320)
        st.plotly_chart(fig_cat, use_container_width=True)

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")

    with st.form("tx_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            tx_type = st.selectbox("Type", [TransactionType.EXPENSE.value, TransactionType.INCOME.value])
            amount = st.number_input("Amount", min_value=0.0, step=10.0)
            tx_date = st.date_input("Date", value=date.today())
        with col2:
            category = st.text_input("Category")
            description = st.text_input("Description")
        submitted = st.form_submit_button("Add transaction")

    if submitted:
        try:
            tx = run(record_transaction({
                "type": tx_type,
                "amount": amount,
                "category": category.strip(),
                "date": tx_date,
                "description": description,
            }))
            st.success(f"✅ Recorded {tx.type.value} of ${format_money(tx.amount)} in {tx.category}")
            transactions = run(c.transactions.get_all())
        except BudgetWatchError as e:
            st.error(f"❌ {e.message}")

    df = tx_to_df(transactions)
    if not df.empty:
        df = df.sort_values("date", ascending=False)
        disp = df.assign(
            date=df["date"].dt.strftime("%Y-%m-%d"),
            amount=df["amount"].map(lambda v: f"${format_money(v)}"),
        )
        st.dataframe(disp.reset_index(drop=True), use_container_width=True)
        st.download_button("⬇ Download CSV", df.to_csv(index=False), file_name="transactions.csv")
    else:
        st.info("No transactions to display.")

    if st.session_state.alert_log:
        st.subheader("🔔 Alert Notifications")
        for entry in reversed(st.session_state.alert_log):
            if entry["severity"] == "error":
                st.error(f"🔴 [{entry['time']}] {entry['message']}")
            else:
                st.warning(f"🟠 [{entry['time']}] {entry['message']}")

elif menu == "💰 Budgets":
    st.title(f"💰 Budget for {month}")

    categories = sorted({t.category for t in transactions} | set(budget.category_limits if budget else {}))
    with st.form("budget_form"):
        total_limit = st.number_input(
            "Total monthly limit", min_value=0.0, step=50.0,
            value=float(budget.total_limit) if budget else 0.0,
        )
        limits = {}
        for name in categories:
            current = as_limit(budget.category_limits.get(name)) if budget else None
            limits[name] = st.number_input(name, min_value=0.0, step=10.0, value=current or 0.0, key=f"limit_{name}")
        saved = st.form_submit_button("Save budget")

    if saved:
        try:
            budget = run(c.budgets.save(month, total_limit, limits))
            st.success("Budget saved")
        except BudgetWatchError as e:
            st.error(f"❌ {e.message}")

    if budget:
        spend = aggregate(transactions, month)
        for name, raw_limit in budget.category_limits.items():
            limit = as_limit(raw_limit)
            if limit is None:
                continue
            spent = spend.per_category.get(name, 0.0)
            st.metric(name, f"${format_money(spent)} / ${format_money(limit)}", f"${format_money(limit - spent)} left")
            st.progress(min(1.0, spent / limit))

elif menu == "📑 Reports":
    st.title("📑 Spending Trends")
    months = recent_months(month, 6)
    totals = run(expenses_by_month(transactions, months))
    budget_limits = []
    for m in months:
        b = run(c.budgets.get_for_month(m))
        budget_limits.append(b.total_limit if b else None)

    fig_ts = go.Figure()
    fig_ts.add_trace(go.Bar(x=list(months), y=[totals[m] for m in months], name="Expenses"))
    fig_ts.add_trace(go.Scatter(x=list(months), y=budget_limits, mode="lines+markers", name="Budget limit"))
    fig_ts.update_layout(margin=dict(t=30, b=10, l=10, r=10))
    st.plotly_chart(fig_ts, use_container_width=True)

    rows = []
    for m in months:
        alerts = run(c.alerts.calculate_budget_alerts(m))
        rows.append({"Month": m, **alerts.summary.to_dict()})
    st.table(pd.DataFrame(rows))

st.sidebar.caption(f"Today: {month_key(date.today())}")
