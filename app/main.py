import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date

import streamlit as st
import pandas as pd
import numpy as np
import plotly.graph_objects as go
import plotly.express as px

from core.budgets import OVER, WARNING
from core.config import get_settings
from core.domain import EXPENSE, INCOME, TRANSACTION_TYPES, suggested_categories
from core.errors import FinanceError, ValidationError
from core.formatting import format_currency, format_date, format_percent, period_label
from core.insights import TIER_COLORS, category_share
from core.logging import configure_logging, get_logger
from core.periods import current_period
from core.services import CHART_CATEGORY_LIMIT, BudgetService, ReportService
from core.store import build_store
from core.transforms import SORT_KEYS, browse_transactions, transaction_to_dict

settings = get_settings()
configure_logging(settings.log_level, settings.log_json)
log = get_logger("app")

st.set_page_config(page_title="Personal Finance Tracker", layout="wide")

if "store" not in st.session_state:
    try:
        st.session_state.store = build_store(settings)
    except FinanceError as e:
        log.error("could not open store: %s", e)
        st.error(f"Could not load your data: {e}")
        st.stop()

store = st.session_state.store
budget_svc = BudgetService(store)
report_svc = ReportService(store)
cur = settings.currency
money = lambda v: format_currency(v, cur)


def run(action, success: str) -> bool:
    """Run a store write, reporting failures as a notification."""
    try:
        action()
    except ValidationError as e:
        for field, msg in e.errors.items():
            st.error(f"{field.capitalize()}: {msg}")
        return False
    except FinanceError as e:
        log.error("operation failed: %s", e)
        st.toast(f"Something went wrong: {e}")
        return False
    st.toast(success)
    return True


def tx_to_df(tx_list):
    df = pd.DataFrame([transaction_to_dict(t) for t in tx_list],
                      columns=["id", "amount", "date", "description", "type", "category", "created_at", "updated_at"])
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    return df


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "🧾 Transactions", "💰 Budgets", "📊 Analytics", "💡 Insights"]
)
st.sidebar.caption(f"Today: {format_date(date.today())}")

if menu == "🏠 Overview":
    st.title("🏠 Overview")
    s = report_svc.dashboard()

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Monthly Income", money(s.total_income))
    with k2:
        st.metric("Monthly Expenses", money(s.total_expenses))
    with k3:
        st.metric("Net Amount", ("+" if s.net_amount >= 0 else "-") + money(abs(s.net_amount)))
    with k4:
        st.metric("Budget Usage", format_percent(s.budget_used) if s.total_budget > 0 else "No Budget")

    c1, c2, c3 = st.columns(3)
    with c1:
        st.subheader("This Month")
        st.write(f"**{s.transaction_count}** transactions")
        st.caption(f"Average per transaction: {money(s.average_expense)}")
    with c2:
        st.subheader("Top Category")
        if s.top_category:
            st.write(f"**{s.top_category[0]}**")
            st.caption(money(s.top_category[1]))
        else:
            st.caption("No expenses yet")
    with c3:
        st.subheader("Budget Status")
        if s.total_budget > 0:
            st.write(f"Remaining: **{money(s.total_budget - s.total_expenses)}**")
            st.progress(min(s.budget_used, 100) / 100)
        else:
            st.caption("No budget set for this month")

    df = tx_to_df(store.list_transactions())
    if not df.empty:
        st.subheader("📋 Recent Transactions")
        disp = df.head(8)[["date", "description", "category", "type", "amount"]].copy()
        disp["date"] = disp["date"].dt.strftime("%Y-%m-%d").fillna("-")
        disp["amount"] = disp["amount"].map(money)
        st.table(disp.reset_index(drop=True))
    else:
        st.info("No transactions to display.")

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")

    editing = st.session_state.get("editing_tx")
    edit_tx = store.find_transaction(editing).get_or_else(None) if editing else None

    st.subheader("✏️ Edit Transaction" if edit_tx else "➕ Add New Transaction")
    kind = st.radio("Type", TRANSACTION_TYPES, horizontal=True,
                    index=TRANSACTION_TYPES.index(edit_tx.type) if edit_tx else 1)
    with st.form("tx_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f",
                                     value=edit_tx.amount if edit_tx else 0.0)
            tx_date = st.date_input("Date", value=edit_tx.date if edit_tx else date.today())
        with col2:
            options = list(suggested_categories(kind))
            idx = options.index(edit_tx.category) if edit_tx and edit_tx.category in options else 0
            category = st.selectbox("Category", options, index=idx)
        description = st.text_area("Description", max_chars=100,
                                   value=edit_tx.description if edit_tx else "")
        submitted = st.form_submit_button("Update Transaction" if edit_tx else "Add Transaction")

    if submitted:
        data = {"amount": amount, "date": tx_date, "description": description, "type": kind, "category": category}
        if edit_tx:
            ok = run(lambda: store.update_transaction(edit_tx.id, data), "✅ Transaction updated!")
        else:
            ok = run(lambda: store.add_transaction(data), "✅ Transaction added!")
        if ok:
            st.session_state.editing_tx = None
            st.rerun()
    if edit_tx and st.button("Cancel edit"):
        st.session_state.editing_tx = None
        st.rerun()

    st.divider()

    st.subheader("📅 Transaction History")
    all_txs = store.list_transactions()
    f1, f2, f3 = st.columns([3, 1, 1])
    query = f1.text_input("Search transactions", placeholder="Search by description")
    type_filter = f2.selectbox("Type", ["all", INCOME, EXPENSE], key="tx_type_filter")
    sort_by = f3.selectbox("Sort by", SORT_KEYS, key="tx_sort")
    txs = browse_transactions(all_txs, query, None if type_filter == "all" else type_filter, sort_by)

    if not all_txs:
        st.info("No transactions yet. Add one above to get started.")
    elif not txs:
        st.info("No transactions match your search criteria.")
    for t in txs:
        c1, c2, c3, c4 = st.columns([4, 2, 1, 1])
        sign = "+" if t.type == INCOME else "-"
        c1.write(f"**{t.description}**  \n{t.category} · {format_date(t.date)}")
        c2.write(f"{sign}{money(t.amount)}")
        if c3.button("Edit", key=f"edit_{t.id}"):
            st.session_state.editing_tx = t.id
            st.rerun()
        if c4.button("Delete", key=f"del_{t.id}"):
            if run(lambda: store.delete_transaction(t.id), "🗑 Transaction deleted"):
                st.rerun()

    if txs:
        csv = tx_to_df(txs).to_csv(index=False)
        st.download_button("⬇ Download CSV", csv, file_name="transactions.csv")

elif menu == "💰 Budgets":
    st.title("💰 Budgets")
    period = current_period(date.today())

    editing = st.session_state.get("editing_budget")
    edit_b = store.find_budget(editing).get_or_else(None) if editing else None

    st.subheader("✏️ Edit Budget" if edit_b else "➕ Set Budget")
    months = [f"{m:02d}" for m in range(1, 13)]
    with st.form("budget_form", clear_on_submit=True):
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            options = list(suggested_categories(EXPENSE))
            if edit_b and edit_b.category not in options:
                options.append(edit_b.category)
            b_cat = st.selectbox("Category", options,
                                 index=options.index(edit_b.category) if edit_b else 0)
        with col2:
            b_amount = st.number_input("Budget Amount", min_value=0.0, step=10.0, format="%.2f",
                                       value=edit_b.amount if edit_b else 0.0)
        with col3:
            b_month = st.selectbox("Month", months,
                                   index=months.index(edit_b.month) if edit_b else period.month - 1)
        with col4:
            b_year = st.number_input("Year", min_value=2000, max_value=2100, step=1,
                                     value=edit_b.year if edit_b else period.year)
        save_budget = st.form_submit_button("Update Budget" if edit_b else "Set Budget")

    if save_budget:
        data = {"category": b_cat, "amount": b_amount, "month": b_month, "year": int(b_year)}
        if edit_b:
            ok = run(lambda: store.update_budget(edit_b.id, data), "✅ Budget updated!")
        else:
            ok = run(lambda: store.add_budget(data), "✅ Budget saved!")
        if ok:
            st.session_state.editing_budget = None
            st.rerun()
    if edit_b and st.button("Cancel edit"):
        st.session_state.editing_budget = None
        st.rerun()

    with st.expander("All budgets", expanded=edit_b is not None):
        for b in store.list_budgets():
            c1, c2, c3 = st.columns([5, 1, 1])
            c1.write(f"{b.category} · {b.month}/{b.year} · {money(b.amount)}")
            if c2.button("Edit", key=f"edit_budget_{b.id}"):
                st.session_state.editing_budget = b.id
                st.rerun()
            if c3.button("Delete", key=f"del_budget_{b.id}"):
                if run(lambda: store.delete_budget(b.id), "🗑 Budget deleted"):
                    st.rerun()

    st.subheader(f"Budget vs Actual · {period_label(period)}")
    comparison = budget_svc.comparison(period)
    summary = budget_svc.summary(period)

    if not comparison:
        st.info("No budget data. Set up budgets to see budget vs actual comparison.")
    else:
        k1, k2, k3, k4 = st.columns(4)
        k1.metric("Total Budget", money(summary.total_budget))
        k2.metric("Total Spent", money(summary.total_spent))
        k3.metric("Remaining", money(summary.total_remaining))
        k4.metric("Overall Usage", format_percent(summary.overall_percentage),
                  f"{summary.over_budget_count} over budget", delta_color="inverse")

        df_cmp = pd.DataFrame([{"Category": e.category, "Budget": e.budget, "Spent": e.spent} for e in comparison])
        fig = go.Figure()
        fig.add_trace(go.Bar(x=df_cmp["Category"], y=df_cmp["Budget"], name="Budget", marker_color="#3B82F6"))
        fig.add_trace(go.Bar(x=df_cmp["Category"], y=df_cmp["Spent"], name="Spent", marker_color="#EF4444"))
        fig.update_layout(barmode="group", template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig, use_container_width=True)

        for e in comparison:
            icon = "🔴" if e.status == OVER else "🟡" if e.status == WARNING else "🟢"
            st.write(f"{icon} **{e.category}** · {money(e.spent)} / {money(e.budget)} "
                     f"({format_percent(e.percentage)} used, {money(e.remaining)} left)")
            st.progress(min(e.percentage, 100) / 100)

elif menu == "📊 Analytics":
    st.title("📊 Analytics")

    st.subheader("Monthly Financial Overview")
    months = report_svc.monthly_overview()
    if months:
        labels = [period_label(m.period) for m in months]
        inc = pd.Series([m.income for m in months], index=labels)
        exp = pd.Series([m.expenses for m in months], index=labels)
    else:
        labels = [period_label(current_period(date.today()))]
        inc = pd.Series(np.zeros(1), index=labels)
        exp = pd.Series(np.zeros(1), index=labels)

    fig_ts = go.Figure()
    fig_ts.add_trace(go.Bar(x=labels, y=exp.values, name="Expenses", marker_color="#EF4444"))
    fig_ts.add_trace(go.Bar(x=labels, y=inc.values, name="Income", marker_color="#10B981"))
    fig_ts.update_layout(barmode="group", template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
    st.plotly_chart(fig_ts, use_container_width=True)

    net = float(inc.sum() - exp.sum())
    st.metric("Net Amount", ("+" if net >= 0 else "-") + money(abs(net)))

    st.divider()

    st.subheader(f"Top {CHART_CATEGORY_LIMIT} Expense Categories · All Time")
    top = report_svc.top_spending()
    if top:
        df_top = pd.DataFrame([{"Category": c, "Amount": ct.total} for c, ct in top])
        fig_cat = px.pie(df_top, values="Amount", names="Category", template="plotly_dark")
        st.plotly_chart(fig_cat, use_container_width=True)
    else:
        st.info("No expense data available")

    st.subheader(f"Expenses by Category · {period_label(current_period(date.today()))}")
    breakdown = report_svc.category_breakdown()
    if breakdown:
        df_cat = pd.DataFrame([{"Category": c, "Amount": ct.total, "Transactions": ct.count} for c, ct in breakdown])
        df_cat["Amount"] = df_cat["Amount"].map(money)
        st.table(df_cat)
    else:
        st.info("No expenses recorded this month")

elif menu == "💡 Insights":
    st.title("💡 Spending Insights")
    ins = report_svc.insights()

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Monthly Spending Trend",
                  f"{'+' if ins.expense_change >= 0 else ''}{format_percent(ins.expense_change)}",
                  f"vs last month ({money(ins.previous_expenses)})", delta_color="off")
    with k2:
        st.metric("Daily Average", money(ins.daily_average),
                  f"Projected monthly: {money(ins.projected_monthly)}", delta_color="off")
    with k3:
        color = TIER_COLORS[ins.savings_tier]
        st.metric("Savings Rate", format_percent(ins.savings_rate),
                  f"of income ({money(ins.current_income)})", delta_color="off")
        st.markdown(f":{color}[{ins.savings_tier.capitalize()}]")

    left, right = st.columns(2)
    with left:
        st.subheader("Top Spending Categories")
        if not ins.top_categories:
            st.caption("No expenses recorded this month")
        for rank, (cat, amount) in enumerate(ins.top_categories, start=1):
            st.write(f"{rank}. **{cat}** · {money(amount)} "
                     f"({format_percent(category_share(amount, ins.current_expenses))} of total)")
    with right:
        st.subheader("Budget Alerts")
        if not ins.budget_alerts:
            st.success("All budgets on track!")
        for a in ins.budget_alerts:
            text = f"**{a.category}** · {format_percent(a.percentage)} used ({money(a.spent)} / {money(a.budget)})"
            if a.status == OVER:
                st.error(f"{text} · Over budget!")
            else:
                st.warning(f"{text} · Approaching limit")

    st.subheader("Smart Recommendations")
    show = {"warning": st.warning, "danger": st.error, "success": st.success, "info": st.info}
    for rec in report_svc.recommendations(cur):
        show[rec.tier](rec.message)
