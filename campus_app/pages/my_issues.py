"""Student view of their own issues."""

from __future__ import annotations

import streamlit as st

from campus_app.app import register_page
from campus_app.pages._session import current_user, shared_backend
from campus_app.visual.tables import issues_table, render_issue_table


@register_page("My Issues")
def my_issues_page():
    st.title("My Issues")
    user = current_user()
    if user is None:
        st.warning("Sign in on the Setup page first.")
        return
    service, _ = shared_backend()
    mode = st.selectbox(
        "Sort",
        ["newest", "priority"],
        format_func=lambda m: "Newest" if m == "newest" else "Priority (High → Low)",
    )
    issues = service.my_issues(user, mode)
    if not issues:
        st.info("No issues yet.")
        return
    render_issue_table(issues_table(issues), "student")
