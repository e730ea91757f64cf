"""SLA evaluation computed lazily from stored status-history timestamps."""

from __future__ import annotations

from datetime import datetime, timedelta

from .config import SLA_ASSIGNED_HOURS, SLA_DELAYED, SLA_ON_TIME, SLA_OPEN_HOURS, SLA_OVERDUE
from .models import IssueModel, SlaDisplay
from .timestamps import hours_between, utc_now

# Lower rank sorts first in the admin queue
SLA_FLAG_RANK: dict[str, int] = {
    SLA_OVERDUE: 0,
    SLA_DELAYED: 1,
    SLA_ON_TIME: 2,
}


def _first_history_at(issue: IssueModel, status: str | None = None) -> datetime | None:
    for entry in issue.status_history:
        if status is None or entry.status == status:
            return entry.at
    return None


def sla_flag(issue: IssueModel, now: datetime | None = None) -> str:
    """Coarse attention flag: ``on-time``, ``delayed`` or ``overdue``.

    - open for more than 24h since the first history entry -> delayed
    - assigned for more than 48h since the ``assigned`` entry -> overdue
    - anything else, including missing timestamps -> on-time
    """
    now = now or utc_now()
    if issue.status == "open":
        if hours_between(_first_history_at(issue), now) > SLA_OPEN_HOURS:
            return SLA_DELAYED
    elif issue.status == "assigned":
        if hours_between(_first_history_at(issue, "assigned"), now) > SLA_ASSIGNED_HOURS:
            return SLA_OVERDUE
    return SLA_ON_TIME


def sla_rank(issue: IssueModel, now: datetime | None = None) -> int:
    return SLA_FLAG_RANK[sla_flag(issue, now)]


def format_duration(total_minutes: int) -> str:
    """Render minutes as ``"Xh Ym"``, dropping the hour part when it is zero.

    >>> format_duration(125)
    '2h 5m'
    >>> format_duration(42)
    '42m'
    """
    total_minutes = max(int(total_minutes), 0)
    hours, minutes = divmod(total_minutes, 60)
    if hours == 0:
        return f"{minutes}m"
    return f"{hours}h {minutes}m"


def sla_deadline(issue: IssueModel, now: datetime | None = None) -> datetime | None:
    """Deadline for the next milestone, or None once the issue is resolved."""
    if issue.status == "open":
        base = issue.created_at or _first_history_at(issue) or now or utc_now()
        return base + timedelta(hours=SLA_OPEN_HOURS)
    if issue.status in ("assigned", "in_progress"):
        base = _first_history_at(issue, "assigned") or issue.created_at or now or utc_now()
        return base + timedelta(hours=SLA_ASSIGNED_HOURS)
    return None


def sla_display(issue: IssueModel, now: datetime | None = None) -> SlaDisplay:
    """Precise countdown or breach label with a color tier for the status chip."""
    now = now or utc_now()
    if issue.is_deleted:
        return SlaDisplay(state="deleted", label="Deleted", color_tier="muted")
    if issue.status == "resolved":
        return SlaDisplay(state="complete", label="Complete", color_tier="complete")

    deadline = sla_deadline(issue, now)
    if deadline is None:
        return SlaDisplay(state="complete", label="Complete", color_tier="complete")

    remaining_minutes = int((deadline - now).total_seconds() // 60)
    if remaining_minutes >= 0:
        return SlaDisplay(
            state="remaining",
            label=f"{format_duration(remaining_minutes)} remaining",
            color_tier="ok",
        )
    return SlaDisplay(
        state="breached",
        label=f"Breached by {format_duration(-remaining_minutes)}",
        color_tier="breached",
    )
