import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import datetime, time

import streamlit as st
import pandas as pd
import plotly.express as px

from ledger.config import get_settings
from ledger.domain import DateWindow
from ledger.export import activity_frame, projection_frame, report_to_dict, trend_frame
from ledger.logging_setup import configure_logging
from ledger.projections import top
from ledger.services import LedgerReportService
from ledger.transforms import index_patients, load_snapshot
from ledger.window import DASHBOARD_PRESETS, REPORT_PRESETS, latest_timestamp, resolve_window

settings = get_settings()
configure_logging(settings.logging_config_path, settings.log_level)

st.set_page_config(page_title=settings.app_name, layout="wide")


@st.cache_data
def _load(path: str):
    return load_snapshot(path)


patients, transactions = _load(settings.seed_path)
patient_lookup = index_patients(patients)

service = LedgerReportService(
    marketing_channel=settings.marketing_channel,
    no_doctor=settings.no_doctor,
    recent_limit=settings.recent_activity_limit,
    start_hour=settings.working_day_start_hour,
)


def money(amount: int) -> str:
    return f"{settings.currency} {amount:,.0f}"


def bar(rows, key: str, value: str, title: str, k: int = 10):
    df = projection_frame(top(rows, k), key=key, value=value)
    if df.empty:
        st.info(f"No data for {title.lower()}")
        return
    fig = px.bar(df, x=key, y=value, title=title, template="plotly_dark")
    st.plotly_chart(fig, use_container_width=True)


def pie(rows, key: str, value: str, title: str):
    df = projection_frame(rows, key=key, value=value)
    if df.empty or df[value].sum() == 0:
        st.info(f"No data for {title.lower()}")
        return
    fig = px.pie(df, values=value, names=key, title=title)
    st.plotly_chart(fig, use_container_width=True)


st.sidebar.markdown(f"### {settings.app_name}")
as_of = st.sidebar.date_input("As of", value=latest_timestamp(transactions, datetime.now()).date())
now = datetime.combine(as_of, time(hour=12))

menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "📑 Reports"])

if menu == "🏠 Dashboard":
    st.title("🏠 Dashboard")
    timeframe = st.radio(
        "Timeframe",
        DASHBOARD_PRESETS,
        horizontal=True,
        format_func=lambda p: p.capitalize(),
    )
    report = service.build(transactions, resolve_window(timeframe, now), patient_lookup)
    m = report.metrics

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Revenue", money(m.total_revenue))
        st.caption(f"Cash {money(m.cash_revenue)} | Digital {money(m.digital_revenue)}")
    with k2:
        st.metric("Cash on hand", money(m.available_cash))
        st.caption(f"Digital: {money(m.available_digital)}")
    with k3:
        st.metric("Patients", report.patients.total)
        st.caption(f"New {report.patients.new} | Returning {report.patients.returning}")
    with k4:
        st.metric("Expenses", money(m.total_expenses))
        st.caption(f"{m.expense_count} entries | Cash {money(m.cash_expenses)} | Digital {money(m.digital_expenses)}")

    st.subheader("Recent activity")
    recent = activity_frame(report.recent_activity)
    if recent.empty:
        st.info("No activity in this timeframe.")
    else:
        recent["time"] = pd.to_datetime(recent["time"]).dt.strftime("%H:%M")
        recent["amount"] = recent["amount"].map(money)
        st.table(recent)

elif menu == "📑 Reports":
    st.title("📑 Reports")
    labels = {
        "this_month": "This month",
        "last_month": "Last month",
        "last_3_months": "Last 3 months",
        "this_year": "This year",
    }
    preset = st.selectbox("Date range", REPORT_PRESETS, format_func=labels.get)
    window: DateWindow = resolve_window(preset, now)
    report = service.build(transactions, window, patient_lookup)
    views = dict(report.projections)
    m = report.metrics

    if m.revenue_count + m.expense_count == 0:
        st.info("No ledger records in this date range.")
        st.stop()

    financial, performance, growth, services = st.tabs(
        ["Financial Health", "Staff Performance", "Growth & Marketing", "Services & Patients"]
    )

    with financial:
        c1, c2, c3 = st.columns(3)
        c1.metric("Total income", money(m.total_revenue))
        c2.metric("Total expense", money(m.total_expenses))
        c3.metric("Net profit", money(m.net_profit))

        df_trend = trend_frame(report.daily_trend)
        if not df_trend.empty:
            fig = px.area(df_trend, x="date", y=["income", "expense"], title="Income vs expense", template="plotly_dark")
            st.plotly_chart(fig, use_container_width=True)

        left, right = st.columns(2)
        with left:
            pie(views["revenue_by_payment_method"], "method", "amount", "Income by payment method")
        with right:
            bar(views["expenses_by_category"], "category", "amount", "Expenses by category")

    with performance:
        left, right = st.columns(2)
        with left:
            bar(views["revenue_by_doctor"], "doctor", "revenue", "Revenue by doctor")
        with right:
            bar(views["visits_by_doctor"], "doctor", "visits", "Patient volume by doctor")

    with growth:
        p = report.patients
        c1, c2, c3 = st.columns(3)
        c1.metric("New patients", p.new)
        c2.metric("Returning patients", p.returning)
        c3.metric(f"New via {settings.marketing_channel}", p.marketing_referrals)
        if p.unresolved_ids:
            st.caption(f"{len(p.unresolved_ids)} billed patient(s) could not be matched to a registration")

        left, right = st.columns(2)
        with left:
            bar(views["revenue_by_referral_source"], "source", "revenue", "Revenue by referral source")
        with right:
            pie(views["visits_by_referral_source"], "source", "visits", "Patient demographics")

        split = pd.DataFrame(
            {"type": ["New Patients", "Returning Patients"], "count": [p.new, p.returning]}
        )
        if split["count"].sum() > 0:
            st.plotly_chart(px.pie(split, values="count", names="type", title="New vs returning"), use_container_width=True)

    with services:
        left, right = st.columns(2)
        with left:
            bar(views["revenue_by_service_category"], "service", "revenue", "Revenue by service")
        with right:
            bar(views["visits_by_service_category"], "service", "visits", "Visits by service")

    with st.expander("Raw report", expanded=False):
        st.json(report_to_dict(report))
