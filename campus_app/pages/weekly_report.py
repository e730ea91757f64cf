"""Weekly operations report: accurate stats plus optional AI narration."""

from __future__ import annotations

import json

import streamlit as st

from campus_app.analytics.weekly import build_weekly_report
from campus_app.app import register_page
from campus_app.core.config import SETTINGS
from campus_app.core.errors import AuthorizationError
from campus_app.core.identity import require_admin
from campus_app.pages._session import current_user, narration_client, shared_backend
from campus_app.visual.charts import counts_bar


@register_page("Weekly Report")
def weekly_report_page():
    st.title("Weekly Report")
    user = current_user()
    try:
        require_admin(user)
    except AuthorizationError as exc:
        st.warning(str(exc))
        return
    service, _ = shared_backend()

    generate = st.button("Generate report", type="primary")
    if generate:
        st.session_state["weekly_report"] = build_weekly_report(service.list_all(), user, narration_client())

    report = st.session_state.get("weekly_report")
    if report is None:
        st.info("No report generated yet.")
        return

    st.subheader("Summary")
    st.text(report.summary)
    cols = st.columns(2)
    for col, (key, title) in zip(cols, (("byCategory", "Category"), ("byUrgency", "Urgency")), strict=True):
        chart = counts_bar(report.stats.get(key) or {}, key, title)
        if chart is not None:
            col.altair_chart(chart, use_container_width=True)

    st.subheader("Narrative")
    if report.narration_error:
        st.error(f"AI narration unavailable ({report.narration_error}). The summary above is unaffected.")
    else:
        st.markdown(report.narration)

    st.download_button(
        "Download stats JSON",
        data=json.dumps(report.stats, indent=2).encode(SETTINGS.download_encoding),
        file_name="weekly_stats.json",
        mime="application/json",
    )
