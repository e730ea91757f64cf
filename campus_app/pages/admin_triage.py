"""Admin triage page: filtered priority queue plus lifecycle actions."""

from __future__ import annotations

import streamlit as st

from campus_app.app import register_page
from campus_app.core.config import CATEGORIES, STAFF_ROLES, STATUS_ORDER, URGENCIES
from campus_app.core.errors import AuthorizationError, CampusAppError
from campus_app.core.models import IssueModel
from campus_app.core.sla import sla_display
from campus_app.core.status import (
    ACTION_ASSIGN,
    ACTION_DELETE,
    ACTION_RESOLVE,
    ACTION_START,
    ACTION_TARGETS,
    assigned_label,
    available_actions,
    status_label,
    suggest_staff_role,
)
from campus_app.core.triage import ALL, UNASSIGNED, TriageFilters
from campus_app.pages._session import current_user, shared_backend
from campus_app.visual.tables import issues_table, render_issue_table


def _sidebar_filters() -> TriageFilters:
    st.sidebar.markdown("### Filters")
    return TriageFilters(
        status=st.sidebar.selectbox("Status", [ALL, *STATUS_ORDER], format_func=lambda s: s.replace("_", " ")),
        category=st.sidebar.selectbox("Category", [ALL, *CATEGORIES]),
        urgency=st.sidebar.selectbox("Urgency", [ALL, *URGENCIES]),
        assignment=st.sidebar.selectbox(
            "Assigned to",
            [ALL, UNASSIGNED, *STAFF_ROLES],
            format_func=lambda v: v if v == ALL else assigned_label(None if v == UNASSIGNED else v),
        ),
        only_unassigned=st.sidebar.checkbox("Only unassigned"),
        show_deleted=st.sidebar.checkbox("Show deleted"),
    )


def _action_panel(service, user, issue: IssueModel) -> None:
    chip = sla_display(issue)
    st.markdown(f"**{issue.title}** · {status_label(issue.status)} · SLA: {chip.label}")
    actions = available_actions(issue)
    if not actions:
        st.caption("No actions available.")
        return
    try:
        if ACTION_ASSIGN in actions:
            default = suggest_staff_role(issue.category)
            index = STAFF_ROLES.index(default) if default in STAFF_ROLES else 0
            role = st.selectbox("Assign to", STAFF_ROLES, index=index, format_func=assigned_label)
            if st.button("Assign", type="primary"):
                service.assign_issue(user, issue, role)
                st.rerun()
        if ACTION_START in actions and st.button("Mark In Progress"):
            service.advance_issue(user, issue, ACTION_TARGETS[ACTION_START])
            st.rerun()
        if ACTION_RESOLVE in actions and st.button("Mark Resolved"):
            service.advance_issue(user, issue, ACTION_TARGETS[ACTION_RESOLVE])
            st.rerun()
        if ACTION_DELETE in actions:
            confirmed = st.checkbox("I understand this hides the issue from all views")
            if st.button("Delete", disabled=not confirmed):
                service.delete_issue(user, issue, confirmed=confirmed)
                st.rerun()
    except CampusAppError as exc:
        st.error(f"Action failed: {exc}")


@register_page("Admin Triage")
def admin_triage_page():
    st.title("Admin Triage")
    st.caption("Most overdue and most urgent first.")
    user = current_user()
    service, _ = shared_backend()
    filters = _sidebar_filters()
    try:
        queue = service.triage_queue(user, filters)
    except AuthorizationError as exc:
        st.warning(str(exc))
        return
    if not queue:
        st.info("No issues found.")
        return
    render_issue_table(issues_table(queue), "triage")

    st.markdown("---")
    by_id = {issue.id: issue for issue in queue}
    selected = st.selectbox("Act on issue", list(by_id), format_func=lambda i: by_id[i].title)
    if selected:
        _action_panel(service, user, by_id[selected])
