"""Status vocabulary, transition table, and display labels.

This module centralizes which lifecycle actions the UI may offer for an
issue. Lifecycle functions in ``lifecycle.py`` consult the same table, so an
action is callable exactly when it is listed by ``available_actions``.
"""

from __future__ import annotations

from .config import CATEGORY_STAFF_ROLES, STAFF_ROLE_LABELS, STATUS_LABELS
from .models import IssueModel

ACTION_ASSIGN = "assign"
ACTION_START = "start_progress"
ACTION_RESOLVE = "resolve"
ACTION_DELETE = "delete"

# Forward-only moves reachable through ``advance``
ADVANCE_TRANSITIONS: dict[str, frozenset[str]] = {
    "assigned": frozenset({"in_progress", "resolved"}),
    "in_progress": frozenset({"resolved"}),
}

ACTION_TARGETS: dict[str, str] = {
    ACTION_START: "in_progress",
    ACTION_RESOLVE: "resolved",
}


def status_label(value: str | None) -> str:
    """Human label for a stored status.

    >>> status_label("in_progress")
    'In Progress'
    >>> status_label(None)
    'Unknown'
    """
    if not value:
        return "Unknown"
    return STATUS_LABELS.get(value, value)


def assigned_label(value: str | None) -> str:
    """Human label for a staff role; None means unassigned."""
    if not value:
        return "Unassigned"
    return STAFF_ROLE_LABELS.get(value, value)


def suggest_staff_role(category: str | None) -> str | None:
    return CATEGORY_STAFF_ROLES.get(category or "")


def can_advance(current: str | None, target: str) -> bool:
    return target in ADVANCE_TRANSITIONS.get(current or "", frozenset())


def available_actions(issue: IssueModel) -> list[str]:
    """Actions an admin may take on ``issue`` right now, in display order."""
    if issue.is_deleted:
        return []
    if issue.status == "open":
        return [ACTION_ASSIGN] if issue.assigned_to is None else []
    if issue.status == "resolved":
        return [ACTION_DELETE]
    actions = []
    if can_advance(issue.status, "in_progress"):
        actions.append(ACTION_START)
    if can_advance(issue.status, "resolved"):
        actions.append(ACTION_RESOLVE)
    return actions
