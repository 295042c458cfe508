"""Streamlit frontend for the email metrics dashboard.

Replaceable UI layer: all state transitions go through DashboardSession.
"""

from __future__ import annotations

import hashlib
import io
from typing import Sequence

import pandas as pd
import streamlit as st

from app.domain.email_metrics import EmailRecord
from app.domain.errors import CSVParseError, InvalidStateError
from app.logging_utils import configure_logging
from app.services.csv_ingestion_service import get_csv_ingestion_service
from app.services.filter_engine import build_filter_criteria
from app.services.insight_service import InsightStatus, get_insight_service
from app.session import DashboardSession

st.set_page_config(page_title="Email Metrics Dashboard", page_icon="📧", layout="wide")


@st.cache_resource(show_spinner=False)
def _load_backend_handles():
    """Configure logging and build the shared services once per process."""
    configure_logging()
    return {
        "csv_service": get_csv_ingestion_service(),
        "insight_service": get_insight_service(),
    }


def _get_session() -> DashboardSession:
    """Return the per-browser-session dashboard state."""
    if "dashboard" not in st.session_state:
        handles = _load_backend_handles()
        st.session_state.dashboard = DashboardSession(
            ingestion_service=handles["csv_service"],
            insight_service=handles["insight_service"],
        )
    return st.session_state.dashboard


def _view_frame(fields: Sequence[str], records: Sequence[EmailRecord]) -> pd.DataFrame:
    """Build the table frame in header order."""
    return pd.DataFrame([record.as_dict() for record in records], columns=list(fields))


# ── Session state defaults ─────────────────────────────────────────────────
_STATE_DEFAULTS: dict = {
    "uploaded_hash": None,
    "upload_error": None,
    "insight_notice": None,
}

for _key, _val in _STATE_DEFAULTS.items():
    if _key not in st.session_state:
        st.session_state[_key] = _val

session = _get_session()


st.title("Email Metrics Dashboard")

# ── Section 1: upload ──────────────────────────────────────────────────────
st.subheader("Upload your Email Metrics CSV File")
uploaded_file = st.file_uploader(
    "Upload CSV",
    type=["csv"],
    help="The first row should be headers.",
)
if uploaded_file is not None:
    uploaded_bytes = uploaded_file.getvalue()
    uploaded_hash = hashlib.sha256(uploaded_bytes).hexdigest()
    if uploaded_hash != st.session_state.uploaded_hash:
        st.session_state.uploaded_hash = uploaded_hash
        try:
            session.load_csv(uploaded_bytes, source_name=uploaded_file.name)
            st.session_state.upload_error = None
        except CSVParseError as exc:
            st.session_state.upload_error = (
                f"Error parsing CSV file: {exc} Please ensure it's a valid CSV."
            )

if st.session_state.upload_error:
    st.error(st.session_state.upload_error)
st.caption("Upload a CSV file containing email performance data. The first row should be headers.")

if not session.has_data:
    st.info("Upload a CSV file to see your email metrics.")
    st.stop()


# ── Section 2: filters ─────────────────────────────────────────────────────
st.subheader("Apply Filters")
fcol1, fcol2, fcol3 = st.columns(3)
with fcol1:
    search_term = st.text_input(
        "Search Email Name",
        placeholder="e.g., Weekly Newsletter",
        key="filter_search_term",
    )
with fcol2:
    st.markdown("Open Rate (%)")
    lo, hi = st.columns(2)
    min_open_rate = lo.text_input("Min open rate", placeholder="Min", key="filter_min_open", label_visibility="collapsed")
    max_open_rate = hi.text_input("Max open rate", placeholder="Max", key="filter_max_open", label_visibility="collapsed")
with fcol3:
    st.markdown("Click Rate (%)")
    lo, hi = st.columns(2)
    min_click_rate = lo.text_input("Min click rate", placeholder="Min", key="filter_min_click", label_visibility="collapsed")
    max_click_rate = hi.text_input("Max click rate", placeholder="Max", key="filter_max_click", label_visibility="collapsed")

criteria = build_filter_criteria(
    search_term=search_term,
    min_open_rate=min_open_rate,
    max_open_rate=max_open_rate,
    min_click_rate=min_click_rate,
    max_click_rate=max_click_rate,
)
if criteria != session.criteria:
    session.set_criteria(criteria)
    st.session_state.insight_notice = None


# ── Section 3: data table ──────────────────────────────────────────────────
st.subheader("Email Performance Data")
view = session.filtered_view
mcol1, mcol2, mcol3 = st.columns(3)
mcol1.metric("Rows", f"{len(session.dataset):,}")
mcol2.metric("Matching", f"{len(view):,}")
mcol3.metric("Columns", len(session.dataset.fields))

if view:
    view_df = _view_frame(session.dataset.fields, view)
    event = st.dataframe(
        view_df,
        hide_index=True,
        width="stretch",
        on_select="rerun",
        selection_mode="single-row",
        key=f"email_table_{session.view_version}",
    )
    chosen_rows = event.selection.rows
    chosen_row_id = view[chosen_rows[0]].row_id if chosen_rows else None
    if chosen_row_id != session.selected_row_id:
        if chosen_row_id is None:
            session.clear_selection()
        else:
            session.select(chosen_row_id)
        st.session_state.insight_notice = None

    csv_buffer = io.StringIO()
    view_df.to_csv(csv_buffer, index=False)
    st.download_button(
        label="Download filtered CSV",
        data=csv_buffer.getvalue().encode("utf-8"),
        file_name="filtered_email_metrics.csv",
        mime="text/csv",
    )
else:
    st.info("No email data to display or no results match your filters.")


# ── Section 4: AI insight ──────────────────────────────────────────────────
st.subheader("AI-Powered Email Insights")
st.caption(
    "Select an email row from the table above, then click the button below "
    "to get an AI-driven analysis of its performance."
)

selected = session.selected_record
insight_clicked = st.button(
    "✨ Get AI Insights on Selected Email",
    type="primary",
    disabled=selected is None or session.loading,
    width="stretch",
)
if insight_clicked:
    try:
        with st.spinner("Generating insights..."):
            outcome = session.request_insight()
        if outcome.status is InsightStatus.STALE:
            st.session_state.insight_notice = "Selection changed before the analysis finished; result discarded."
        else:
            st.session_state.insight_notice = None
    except InvalidStateError as exc:
        st.session_state.insight_notice = str(exc)

if st.session_state.insight_notice:
    st.warning(st.session_state.insight_notice)

if session.insight:
    analysed = session.dataset.get(session.insight_row_id) if session.insight_row_id is not None else None
    analysed_name = analysed.name if analysed is not None else ""
    with st.container(border=True):
        st.markdown(f'**Analysis for "{analysed_name}"**')
        st.markdown(session.insight)
