"""Issue lifecycle state machine: open -> assigned -> in_progress -> resolved.

Each action returns an ``IssueUpdate``: the single-document field update to
send to the store plus the new history entry. The update carries the whole
``statusHistory`` as read by the actor with one entry appended, so the store
write is one atomic document update. Two admins acting on the same stale read
will therefore race, and the later write wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from .config import DELETED_HISTORY_STATUS, STAFF_ROLES
from .errors import InvalidTransitionError, ValidationError
from .mappers import history_to_documents
from .models import HistoryEntry, IssueModel
from .status import ACTION_ASSIGN, ACTION_DELETE, available_actions, can_advance
from .timestamps import utc_now

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class IssueUpdate:
    issue_id: str | None
    action: str
    entry: HistoryEntry
    history: list[HistoryEntry]
    changes: dict[str, Any] = field(default_factory=dict)

    def to_document_fields(self) -> dict[str, Any]:
        """Camel-cased field map for a single-document store update."""
        fields = dict(self.changes)
        fields["statusHistory"] = history_to_documents(self.history)
        return fields


def _append(issue: IssueModel, entry: HistoryEntry) -> list[HistoryEntry]:
    return [*issue.status_history, entry]


def new_issue_history(now: datetime | None = None) -> list[HistoryEntry]:
    return [HistoryEntry(status="open", at=now or utc_now(), note="Issue submitted")]


def assign(issue: IssueModel, staff_role: str, actor: str, now: datetime | None = None) -> IssueUpdate:
    """Assign an open, unassigned issue to a staff role and move it to ``assigned``."""
    if staff_role not in STAFF_ROLES:
        raise ValidationError(f"Unknown staff role: {staff_role!r}")
    if ACTION_ASSIGN not in available_actions(issue):
        raise InvalidTransitionError(f"Issue {issue.id} cannot be assigned from status {issue.status!r}")
    now = now or utc_now()
    entry = HistoryEntry(status="assigned", at=now, note=f"Assigned to {staff_role}")
    return IssueUpdate(
        issue_id=issue.id,
        action=ACTION_ASSIGN,
        entry=entry,
        history=_append(issue, entry),
        changes={
            "assignedTo": staff_role,
            "status": "assigned",
            "assignedAt": now,
            "assignedBy": actor,
            "updatedAt": now,
        },
    )


def advance(issue: IssueModel, next_status: str, actor: str, now: datetime | None = None) -> IssueUpdate:
    """Move an assigned or in-progress issue forward."""
    if issue.is_deleted or not can_advance(issue.status, next_status):
        raise InvalidTransitionError(f"Issue {issue.id} cannot move from {issue.status!r} to {next_status!r}")
    now = now or utc_now()
    entry = HistoryEntry(status=next_status, at=now)
    return IssueUpdate(
        issue_id=issue.id,
        action=next_status,
        entry=entry,
        history=_append(issue, entry),
        changes={"status": next_status, "updatedAt": now},
    )


def soft_delete(issue: IssueModel, actor: str, *, confirmed: bool, now: datetime | None = None) -> IssueUpdate:
    """Hide a resolved issue. ``status`` stays ``resolved``; only the flag changes."""
    if not confirmed:
        raise InvalidTransitionError("Deletion requires explicit confirmation")
    if ACTION_DELETE not in available_actions(issue):
        raise InvalidTransitionError(f"Issue {issue.id} cannot be deleted from status {issue.status!r}")
    now = now or utc_now()
    entry = HistoryEntry(status=DELETED_HISTORY_STATUS, at=now, note="Deleted by admin")
    return IssueUpdate(
        issue_id=issue.id,
        action=ACTION_DELETE,
        entry=entry,
        history=_append(issue, entry),
        changes={
            "isDeleted": True,
            "deletedAt": now,
            "deletedBy": actor,
            "updatedAt": now,
        },
    )


def apply_update(issue: IssueModel, update: IssueUpdate) -> IssueModel:
    """Local view of the issue after ``update`` lands; the input is not modified."""
    changes = update.changes
    out = replace(issue, status_history=list(update.history))
    if "status" in changes:
        out.status = changes["status"]
    if "assignedTo" in changes:
        out.assigned_to = changes["assignedTo"]
        out.assigned_at = changes.get("assignedAt")
        out.assigned_by = changes.get("assignedBy")
    if changes.get("isDeleted"):
        out.is_deleted = True
        out.deleted_at = changes.get("deletedAt")
        out.deleted_by = changes.get("deletedBy")
    if "updatedAt" in changes:
        out.updated_at = changes["updatedAt"]
    logger.debug("Applied %s to %s", update.action, issue.id)
    return out
