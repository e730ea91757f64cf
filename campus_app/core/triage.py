"""Admin triage queue: compound filter predicate and priority ordering."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from .classifier import urgency_to_score
from .mappers import map_issue
from .models import IssueModel
from .sla import sla_rank
from .store import Snapshot
from .timestamps import utc_now

ALL = "all"
UNASSIGNED = "unassigned"


@dataclass(slots=True, frozen=True)
class TriageFilters:
    status: str = ALL
    category: str = ALL
    urgency: str = ALL
    assignment: str = ALL  # staff role, "unassigned" or "all"
    only_unassigned: bool = False
    show_deleted: bool = False


def matches_filters(issue: IssueModel, filters: TriageFilters) -> bool:
    """Strict conjunction of every active filter."""
    if issue.is_deleted and not filters.show_deleted:
        return False
    if filters.status != ALL and issue.status != filters.status:
        return False
    if filters.category != ALL and issue.category != filters.category:
        return False
    if filters.urgency != ALL and issue.urgency != filters.urgency:
        return False
    if filters.assignment == UNASSIGNED:
        if issue.assigned_to is not None:
            return False
    elif filters.assignment != ALL and issue.assigned_to != filters.assignment:
        return False
    if filters.only_unassigned and issue.assigned_to is not None:
        return False
    return True


def filter_issues(issues: Iterable[IssueModel], filters: TriageFilters) -> list[IssueModel]:
    return [issue for issue in issues if matches_filters(issue, filters)]


def _created_ts(issue: IssueModel) -> float:
    return issue.created_at.timestamp() if issue.created_at else 0.0


def _score(issue: IssueModel) -> int:
    if issue.urgency_score is not None:
        return issue.urgency_score
    return urgency_to_score(issue.urgency)


def triage_sort_key(issue: IssueModel, now: datetime | None = None) -> tuple[int, int, float]:
    """SLA rank ascending, then urgency score and creation time descending."""
    return (sla_rank(issue, now), -_score(issue), -_created_ts(issue))


def sort_for_triage(issues: Iterable[IssueModel], now: datetime | None = None) -> list[IssueModel]:
    now = now or utc_now()
    return sorted(issues, key=lambda issue: triage_sort_key(issue, now))


def sort_student_view(issues: Iterable[IssueModel], mode: str = "newest") -> list[IssueModel]:
    """Student list: ``newest`` first, or ``priority`` (score, then newest)."""
    visible = [issue for issue in issues if not issue.is_deleted]
    if mode != "priority":
        return sorted(visible, key=lambda issue: -_created_ts(issue))
    return sorted(
        visible,
        key=lambda issue: (-(issue.urgency_score or 0), -_created_ts(issue)),
    )


def triage_queue(
    issues: Iterable[IssueModel],
    filters: TriageFilters | None = None,
    now: datetime | None = None,
) -> list[IssueModel]:
    return sort_for_triage(filter_issues(issues, filters or TriageFilters()), now)


@dataclass(slots=True)
class TriageBoard:
    """Reducer over live store snapshots; holds the latest issue set."""

    issues: list[IssueModel] = field(default_factory=list)
    snapshots_seen: int = 0

    def apply_snapshot(self, snapshot: Snapshot) -> TriageBoard:
        self.issues = [map_issue(doc) for doc in snapshot.docs]
        self.snapshots_seen += 1
        return self

    def view(self, filters: TriageFilters | None = None, now: datetime | None = None) -> list[IssueModel]:
        return triage_queue(self.issues, filters, now)
