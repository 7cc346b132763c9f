"""Streamlit front-end for the working-capital dashboard."""
from __future__ import annotations

from io import BytesIO

import pandas as pd
import streamlit as st

from wc_dashboard import (
    BuildPriorityIssuesUseCase,
    DashboardContext,
    Dataset,
    LoadDashboardUseCase,
)
from wc_dashboard.application.dto import DashboardRequest
from wc_dashboard.application.use_cases import build_aggregator
from wc_dashboard.config import DEFAULT_ENTITY_FILTER, SETTINGS
from wc_dashboard.domain.errors import UploadError, WcDashboardError
from wc_dashboard.domain.models import Entity
from wc_dashboard.domain.quarters import format_quarter, quarter_range
from wc_dashboard.infrastructure.cache.dataset_cache import DatasetCache
from wc_dashboard.infrastructure.parsing.workbook import build_template, workbook_to_snapshots
from wc_dashboard.infrastructure.repositories.snapshot_repositories import (
    CsvSnapshotRepository,
    InMemorySnapshotRepository,
)
from wc_dashboard.presentation.report import (
    composition_to_rows,
    issues_to_rows,
    render_csv,
    render_html,
    rows_to_dataframe,
    snapshots_to_rows,
    trend_to_rows,
)

st.set_page_config(page_title="Working Capital Dashboard", layout="wide")
st.title("Working Capital Dashboard")

aggregator = build_aggregator(SETTINGS)


@st.cache_resource
def shared_cache() -> DatasetCache[Dataset]:
    return DatasetCache(ttl_seconds=SETTINGS.cache_ttl_seconds)


def load_dashboard(request: DashboardRequest):
    uploaded: Dataset | None = st.session_state.get("uploaded")
    if uploaded is not None:
        context = DashboardContext(
            repository=InMemorySnapshotRepository(uploaded),
            aggregator=aggregator,
            cache=DatasetCache(ttl_seconds=0),
        )
    else:
        context = DashboardContext(
            repository=CsvSnapshotRepository(SETTINGS.sample_data_path),
            aggregator=aggregator,
            cache=shared_cache(),
        )
    return LoadDashboardUseCase(context).execute(request)


with st.sidebar:
    st.subheader("Upload data")
    upload = st.file_uploader("Upload workbook", type=["xlsx", "xls"])
    if upload is not None and st.button("Merge upload"):
        try:
            result = workbook_to_snapshots(BytesIO(upload.read()), filename=upload.name)
        except UploadError as exc:
            st.error(str(exc))
            for detail in exc.details:
                st.caption(detail)
        else:
            base = st.session_state.get("uploaded") or load_dashboard(DashboardRequest()).dataset
            st.session_state["uploaded"] = base.merge(result.snapshots)
            st.success(f"Merged {result.valid_rows}/{result.total_rows} rows")
            for error in result.errors:
                st.caption(error)
    if st.button("Reset to sample data"):
        st.session_state["uploaded"] = None
        shared_cache().invalidate()
    st.download_button(
        "Download template",
        data=build_template(),
        file_name="wc_template.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

overview = load_dashboard(DashboardRequest())
quarters = list(overview.all_quarters)
if not quarters:
    st.info("No data loaded.")
    st.stop()

col1, col2, col3 = st.columns(3)
with col1:
    start = st.selectbox("From", quarters, index=0, format_func=format_quarter)
with col2:
    end = st.selectbox("To", quarters, index=len(quarters) - 1, format_func=format_quarter)
with col3:
    entity_options = [DEFAULT_ENTITY_FILTER] + [e.value for e in overview.dataset.entities()]
    entity = st.selectbox("Entity", entity_options)

try:
    response = load_dashboard(DashboardRequest(start_quarter=start, end_quarter=end, entity=entity))
except WcDashboardError as exc:
    st.error(str(exc))
    st.stop()

dataset = response.dataset
focus = end
focus_entity = Entity.CONSOLIDATED if entity == DEFAULT_ENTITY_FILTER else Entity.parse(entity)

st.caption(f"{response.count} rows, {format_quarter(start)} - {format_quarter(end)}")
yoy = aggregator.yoy_delta(dataset, focus, focus_entity)
metrics = aggregator.trend_series(dataset, focus_entity, [focus])[0].metrics
m1, m2, m3, m4, m5 = st.columns(5)
m1.metric("Working capital", f"{yoy.current_value:,.0f}", f"{yoy.percent_change:+.1f}% YoY" if yoy.has_prior else None)
m2.metric("DSO", metrics.dso)
m3.metric("DIO", metrics.dio)
m4.metric("DPO", metrics.dpo)
m5.metric("CCC", metrics.ccc)

tabs = st.tabs(["Data", "Composition", "Trend", "Priority issues"])
with tabs[0]:
    st.dataframe(rows_to_dataframe(response.rows), use_container_width=True)
    table_rows = snapshots_to_rows(response.rows)
    col_csv, col_html = st.columns(2)
    with col_csv:
        st.download_button(
            "Download CSV",
            data=render_csv(table_rows),
            file_name="working_capital.csv",
            mime="text/csv",
        )
    with col_html:
        st.download_button(
            "Download HTML",
            data=render_html(table_rows, title=f"Working capital {format_quarter(start)} - {format_quarter(end)}").encode("utf-8"),
            file_name="working_capital.html",
            mime="text/html",
        )
with tabs[1]:
    st.dataframe(pd.DataFrame(composition_to_rows(aggregator.composition(dataset, focus))))
with tabs[2]:
    in_range = quarter_range(start, end) or [focus]
    st.dataframe(pd.DataFrame(trend_to_rows(aggregator.trend_series(dataset, focus_entity, in_range))))
with tabs[3]:
    issues = BuildPriorityIssuesUseCase(aggregator).execute(dataset, focus)
    issue_rows = issues_to_rows(issues)
    if issues:
        st.dataframe(pd.DataFrame(issue_rows), use_container_width=True)
    else:
        st.info("No adverse year-over-year changes.")
    st.download_button(
        "Download issues (HTML)",
        data=render_html(
            issue_rows,
            empty_message="No adverse year-over-year changes.",
            title=f"Priority issues {format_quarter(focus)}",
        ).encode("utf-8"),
        file_name=f"priority_issues_{str(focus).replace('.', '-')}.html",
        mime="text/html",
    )
