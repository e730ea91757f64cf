"""Student submission page."""

from __future__ import annotations

import streamlit as st

from campus_app.app import register_page
from campus_app.core.errors import AuthorizationError, ValidationError
from campus_app.pages._session import current_user, shared_backend


@register_page("Submit Issue")
def submit_issue_page():
    st.title("Report an Issue")
    st.caption("Category and urgency are filled in automatically from your description.")
    service, _ = shared_backend()

    with st.form("submit_issue", clear_on_submit=True):
        title = st.text_input("Title")
        description = st.text_area("Description")
        location = st.text_input("Location", placeholder="e.g. Hostel A, Room 12")
        submitted = st.form_submit_button("Submit", type="primary")

    if not submitted:
        return
    try:
        issue = service.submit_issue(current_user(), title, description, location)
    except (ValidationError, AuthorizationError) as exc:
        st.error(str(exc))
        return
    st.success(f"Issue submitted: {issue.category} / {issue.urgency} urgency.")
    st.caption(f"Auto-tagging: {issue.auto_reason}")
    if issue.possible_duplicate_of:
        st.info("A similar issue was reported here recently; staff have been pointed to both reports.")
