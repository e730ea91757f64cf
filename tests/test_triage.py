from datetime import datetime, timedelta

import pytz

from campus_app.core.models import HistoryEntry, IssueModel
from campus_app.core.store import Snapshot
from campus_app.core.triage import (
    TriageBoard,
    TriageFilters,
    filter_issues,
    matches_filters,
    sort_for_triage,
    sort_student_view,
    triage_queue,
)

NOW = datetime(2024, 9, 10, 12, 0, tzinfo=pytz.UTC)


def _issue(issue_id, *, status="open", urgency="medium", score=2, category="water", assigned_to=None,
           hours_ago=1, assigned_hours_ago=None, is_deleted=False):
    history = [HistoryEntry("open", NOW - timedelta(hours=hours_ago))]
    if assigned_hours_ago is not None:
        history.append(HistoryEntry("assigned", NOW - timedelta(hours=assigned_hours_ago)))
    return IssueModel(
        id=issue_id,
        title=f"Issue {issue_id}",
        description="",
        category=category,
        urgency=urgency,
        urgency_score=score,
        location="Hostel A",
        status=status,
        created_by="s1",
        assigned_to=assigned_to,
        status_history=history,
        created_at=NOW - timedelta(hours=hours_ago),
        is_deleted=is_deleted,
    )


def _sample_issues():
    return [
        _issue("open-unassigned", status="open"),
        _issue("open-assigned", status="open", assigned_to="plumber"),
        _issue("assigned", status="assigned", assigned_to="plumber", assigned_hours_ago=2),
        _issue("wifi", status="open", category="wifi", urgency="high", score=3),
        _issue("deleted", status="resolved", assigned_to="plumber", is_deleted=True),
    ]


def test_sla_dominates_urgency():
    overdue = _issue("overdue", status="assigned", assigned_to="plumber", urgency="low", score=1,
                     hours_ago=60, assigned_hours_ago=50)
    on_time = _issue("on-time", status="open", urgency="high", score=3, hours_ago=2)
    delayed = _issue("delayed", status="open", urgency="medium", score=2, hours_ago=30)
    ordered = sort_for_triage([on_time, delayed, overdue], NOW)
    assert [i.id for i in ordered] == ["overdue", "delayed", "on-time"]


def test_urgency_then_recency():
    older_high = _issue("older-high", urgency="high", score=3, hours_ago=5)
    newer_high = _issue("newer-high", urgency="high", score=3, hours_ago=1)
    low = _issue("low", urgency="low", score=1, hours_ago=0.5)
    ordered = sort_for_triage([low, older_high, newer_high], NOW)
    assert [i.id for i in ordered] == ["newer-high", "older-high", "low"]


def test_missing_score_falls_back_to_urgency():
    no_score = _issue("no-score", urgency="high", score=None, hours_ago=3)
    medium = _issue("medium", urgency="medium", score=2, hours_ago=1)
    assert [i.id for i in sort_for_triage([medium, no_score], NOW)] == ["no-score", "medium"]


def test_default_filters_hide_deleted():
    ids = {i.id for i in filter_issues(_sample_issues(), TriageFilters())}
    assert "deleted" not in ids
    assert len(ids) == 4
    shown = filter_issues(_sample_issues(), TriageFilters(show_deleted=True))
    assert "deleted" in {i.id for i in shown}


def test_open_and_only_unassigned_is_strict_conjunction():
    filters = TriageFilters(status="open", only_unassigned=True)
    ids = {i.id for i in filter_issues(_sample_issues(), filters)}
    assert ids == {"open-unassigned", "wifi"}
    assert not matches_filters(_issue("x", status="open", assigned_to="plumber"), filters)


def test_assignment_filter():
    issues = _sample_issues()
    assert {i.id for i in filter_issues(issues, TriageFilters(assignment="unassigned"))} == {"open-unassigned", "wifi"}
    assert {i.id for i in filter_issues(issues, TriageFilters(assignment="plumber"))} == {"open-assigned", "assigned"}


def test_category_and_urgency_filters():
    issues = _sample_issues()
    assert [i.id for i in filter_issues(issues, TriageFilters(category="wifi"))] == ["wifi"]
    assert [i.id for i in filter_issues(issues, TriageFilters(urgency="high", category="water"))] == []


def test_student_view_sorting():
    issues = [
        _issue("old-high", urgency="high", score=3, hours_ago=10),
        _issue("new-low", urgency="low", score=1, hours_ago=1),
        _issue("mid-none", urgency="medium", score=None, hours_ago=5),
        _issue("gone", is_deleted=True),
    ]
    assert [i.id for i in sort_student_view(issues)] == ["new-low", "mid-none", "old-high"]
    assert [i.id for i in sort_student_view(issues, "priority")] == ["old-high", "new-low", "mid-none"]


def test_board_reduces_snapshots():
    board = TriageBoard()
    docs = [
        {"id": "a", "title": "Router down", "category": "wifi", "urgency": "high", "urgencyScore": 3,
         "status": "open", "createdAt": NOW - timedelta(hours=1),
         "statusHistory": [{"status": "open", "at": NOW - timedelta(hours=1)}]},
        {"id": "b", "title": "Fan broken", "category": "electricity", "urgency": "medium", "urgencyScore": 2,
         "status": "open", "createdAt": NOW - timedelta(hours=30),
         "statusHistory": [{"status": "open", "at": NOW - timedelta(hours=30)}]},
    ]
    board.apply_snapshot(Snapshot(docs=docs))
    assert [i.id for i in board.view(now=NOW)] == ["b", "a"]
    board.apply_snapshot(Snapshot(docs=docs[:1]))
    assert board.snapshots_seen == 2
    assert [i.id for i in board.view(now=NOW)] == ["a"]


def test_triage_queue_combines_filter_and_sort():
    queue = triage_queue(_sample_issues(), TriageFilters(status="open"), NOW)
    assert [i.id for i in queue][0] == "wifi"
