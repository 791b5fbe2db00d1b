import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import streamlit as st
import pandas as pd
import numpy as np
import plotly.express as px
import plotly.graph_objects as go

from lume.analytics import (
    daily_spending,
    format_currency,
    month_progress,
    recent_transactions,
    spike_days,
    transaction_rows,
)
from lume.config import configure_logging, ensure_data_directory
from lume.events import TRANSACTION_ADDED, over_budget_handler
from lume.store import StateStore
from lume.storage import FileBackend, StateStorage

COLORS = {
    "mint": "#34D399",
    "coral": "#F87171",
    "pink": "#F472B6",
    "purple": "#C084FC",
}

configure_logging()
st.set_page_config(page_title="Lume", page_icon="💜", layout="centered")


def alert_collector(event, payload):
    result = over_budget_handler(event, payload)
    if "alert" in result:
        st.session_state.alerts.append({
            "message": result["alert"],
            "timestamp": pd.Timestamp.now().strftime("%H:%M:%S"),
        })
    return result


if "store" not in st.session_state:
    storage = StateStorage(FileBackend(ensure_data_directory()))
    st.session_state.store = StateStore(storage=storage)
    st.session_state.store.events.subscribe(TRANSACTION_ADDED, alert_collector)
if "alerts" not in st.session_state:
    st.session_state.alerts = []

store: StateStore = st.session_state.store
# metrics depend on the wall clock, not only on mutations
metrics = store.refresh()
now = store.clock()
config = store.state.config
symbol = config.currency_symbol


def tx_to_df(tx_list):
    df = pd.DataFrame(transaction_rows(tx_list, now), columns=["date", "amount", "category", "note"])
    df["category"] = df["category"].fillna("💸")
    df["note"] = df["note"].fillna("Expense")
    df["date"] = df["date"].map(lambda d: d.strftime("%b %d, %H:%M") if pd.notna(d) else "-")
    return df


def onboarding_view():
    st.title("💜 Lume")
    st.caption("Mindful spending, liquid clarity.")
    with st.form("onboarding_form"):
        goal = st.text_input("Monthly goal", placeholder="0")
        submitted = st.form_submit_button("Start Journey")
    if submitted:
        if store.set_monthly_limit(goal):
            st.rerun()
        else:
            st.error("Please enter a non-negative number for your monthly goal.")


def add_expense_form():
    with st.expander("➕ Add expense", expanded=False):
        with st.form("expense_form", clear_on_submit=True):
            amount = st.text_input(f"Amount ({symbol})", placeholder="0")
            col1, col2 = st.columns([3, 1])
            with col1:
                note = st.text_input("Note (optional)")
            with col2:
                category = st.text_input("Emoji (optional)", max_chars=4)
            submitted = st.form_submit_button("Confirm Expense")
        if submitted:
            if store.add_transaction(amount, note=note, category=category) is None:
                st.error("Enter an amount greater than zero.")
            else:
                st.rerun()


def dashboard_view():
    st.subheader("Available today")
    k1, k2 = st.columns([2, 1])
    with k1:
        st.metric(
            "Available Daily",
            format_currency(metrics.remaining_today, symbol),
            delta="Over" if metrics.is_over_budget else "On Track",
            delta_color="inverse" if metrics.is_over_budget else "normal",
        )
    with k2:
        st.metric("Monthly Goal", format_currency(config.monthly_limit, symbol))

    c1, c2, c3 = st.columns(3)
    c1.metric("Daily target", format_currency(metrics.daily_target, symbol))
    c2.metric("Spent today", format_currency(metrics.spent_today, symbol))
    c3.metric("Left this month", format_currency(metrics.remaining_monthly, symbol))
    st.caption(f"{metrics.days_remaining} day(s) left including today")

    add_expense_form()

    if st.session_state.alerts:
        for alert in reversed(st.session_state.alerts[-3:]):
            st.warning(f"🔴 [{alert['timestamp']}] {alert['message']}")
        if st.button("Clear Alerts", key="btn_clear_alerts"):
            st.session_state.alerts = []
            st.rerun()

    st.subheader("Recent")
    recent = recent_transactions(store.state.transactions, now)
    if recent:
        disp = tx_to_df(recent)
        disp["amount"] = disp["amount"].map(lambda x: f"-{format_currency(x, symbol)}")
        st.table(disp[["category", "note", "date", "amount"]].reset_index(drop=True))
    else:
        st.info("No transactions yet")


def analytics_view():
    st.title("📊 Analytics")
    progress = month_progress(metrics.total_spent_month, config.monthly_limit)
    st.metric(
        "Spent this month",
        format_currency(metrics.total_spent_month, symbol),
        delta=f"{round(progress * 100)}% of goal",
        delta_color="off",
    )
    st.progress(min(1.0, progress))

    series = daily_spending(store.state.transactions, now)
    days = np.array([day for day, _ in series])
    amounts = np.array([amount for _, amount in series])
    colors = np.where(amounts > metrics.avg_daily * 1.5, COLORS["coral"], COLORS["purple"])

    fig = go.Figure(go.Bar(x=days, y=amounts, marker_color=colors, opacity=0.8))
    fig.add_hline(y=metrics.avg_daily, line_dash="dot", annotation_text="Average daily")
    fig.update_layout(
        xaxis_title="Day",
        yaxis_title=f"Spent ({symbol})",
        margin=dict(t=30, b=10, l=10, r=10),
    )
    st.plotly_chart(fig, use_container_width=True)

    spikes = list(spike_days(series, metrics.avg_daily))
    if spikes:
        st.caption("High spending days: " + ", ".join(str(d) for d in spikes))

    month_df = pd.DataFrame(series, columns=["day", "amount"])
    month_df["cumulative"] = month_df["amount"].cumsum()
    month_df["pace"] = metrics.avg_daily * month_df["day"]
    fig_pace = px.line(
        month_df[month_df["day"] <= now.day],
        x="day",
        y=["cumulative", "pace"],
        labels={"value": f"Amount ({symbol})", "day": "Day", "variable": ""},
        title="Spending pace",
    )
    st.plotly_chart(fig_pace, use_container_width=True)


def settings_view():
    st.title("⚙️ Settings")
    with st.form("settings_form"):
        goal = st.text_input("Monthly goal", value=f"{config.monthly_limit:g}")
        currency = st.text_input("Currency symbol", value=symbol, max_chars=3)
        saved = st.form_submit_button("Save")
    if saved:
        if store.update_settings(goal, currency):
            st.success("Settings saved")
            st.rerun()
        else:
            st.error("Nothing saved: the monthly goal must be a non-negative number and the currency symbol cannot be empty.")

    st.divider()
    confirm = st.checkbox("I understand this deletes every expense and my goal")
    if st.button("Reset All Data", type="primary", disabled=not confirm):
        store.reset()
        st.session_state.alerts = []
        st.rerun()


if not config.onboarding_complete:
    onboarding_view()
else:
    menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "📊 Analytics", "⚙️ Settings"])
    if menu == "🏠 Dashboard":
        dashboard_view()
    elif menu == "📊 Analytics":
        analytics_view()
    else:
        settings_view()
