from datetime import datetime, timedelta

import pytest
import pytz

from campus_app.core.duplicates import DuplicateDetector
from campus_app.core.errors import AuthorizationError, InvalidTransitionError, StoreError, ValidationError
from campus_app.core.identity import UserDirectory
from campus_app.core.models import UserContext
from campus_app.core.service import IssueService
from campus_app.core.store import IssueStore
from campus_app.core.triage import TriageFilters

STUDENT = UserContext(uid="s1", role="student")
OTHER_STUDENT = UserContext(uid="s2", role="student")
ADMIN = UserContext(uid="a1", role="admin")
ADMIN_TWO = UserContext(uid="a2", role="admin")


class _Clock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now

    def tick(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


def _sample_service(detector=None):
    clock = _Clock(datetime(2024, 9, 10, 8, 0, tzinfo=pytz.UTC))
    store = IssueStore(clock=clock)
    return IssueService(store, detector=detector, clock=clock), store, clock


class _UnindexedStore:
    def query(self, query=None):
        raise RuntimeError("FAILED_PRECONDITION: query requires an index")


class _NullDetector:
    def lookup(self, candidate, *, now=None):
        return None


def test_submit_classifies_and_opens_history():
    service, _, clock = _sample_service()
    issue = service.submit_issue(STUDENT, "  Tap leaking ", "second floor bathroom", "Hostel A")
    assert issue.id
    assert issue.title == "Tap leaking"
    assert issue.category == "water"
    assert issue.urgency == "high"
    assert issue.urgency_score == 3
    assert issue.status == "open"
    assert issue.assigned_to is None
    assert issue.created_by == "s1"
    assert issue.created_at == clock.now
    assert [h.status for h in issue.status_history] == ["open"]
    assert issue.status_history[0].note == "Issue submitted"
    assert issue.possible_duplicate_of is None
    assert issue.duplicate_group_id.startswith("water|hostel a|")


@pytest.mark.parametrize(
    "title, location",
    [("", "Hostel A"), ("   ", "Hostel A"), ("Tap leaking", ""), ("Tap leaking", "  ")],
)
def test_submit_validation_writes_nothing(title, location):
    service, store, _ = _sample_service()
    with pytest.raises(ValidationError):
        service.submit_issue(STUDENT, title, "", location)
    assert store.query() == []


def test_submit_requires_login():
    service, store, _ = _sample_service()
    with pytest.raises(AuthorizationError):
        service.submit_issue(None, "Tap leaking", "", "Hostel A")
    assert store.query() == []


def test_duplicate_linking_and_master_count():
    service, _, clock = _sample_service()
    first = service.submit_issue(STUDENT, "Tap leaking", "second floor bathroom", "Hostel A")
    clock.tick(hours=1)
    second = service.submit_issue(OTHER_STUDENT, "Tap leaking", "second floor bathroom", "Hostel A")
    assert second.possible_duplicate_of == first.id
    assert second.master_issue_id == first.id
    clock.tick(hours=1)
    third = service.submit_issue(STUDENT, "Tap leaking", "bathroom second floor", "Hostel A")
    assert third.master_issue_id == first.id
    assert service.get_issue(first.id).duplicates_count == 2
    # advisory only: each report keeps its own lifecycle
    assert third.status == "open"


def test_no_duplicate_outside_window_or_location():
    service, _, clock = _sample_service()
    service.submit_issue(STUDENT, "Tap leaking", "second floor bathroom", "Hostel A")
    elsewhere = service.submit_issue(STUDENT, "Tap leaking", "second floor bathroom", "Hostel B")
    assert elsewhere.possible_duplicate_of is None
    clock.tick(hours=13)
    later = service.submit_issue(STUDENT, "Tap leaking", "second floor bathroom", "Hostel A")
    assert later.possible_duplicate_of is None


def test_duplicate_lookup_failure_still_submits():
    service, store, _ = _sample_service(detector=DuplicateDetector(_UnindexedStore()))
    issue = service.submit_issue(STUDENT, "Tap leaking", "", "Hostel A")
    assert issue.possible_duplicate_of is None
    assert len(store.query()) == 1


def test_lifecycle_through_service():
    service, _, clock = _sample_service(detector=_NullDetector())
    issue = service.submit_issue(STUDENT, "Router not responding", "", "Library")
    clock.tick(minutes=5)
    issue = service.assign_issue(ADMIN, issue, "wifi_team")
    clock.tick(minutes=5)
    issue = service.advance_issue(ADMIN, issue, "in_progress")
    clock.tick(minutes=5)
    issue = service.advance_issue(ADMIN, issue, "resolved")
    stored = service.get_issue(issue.id)
    assert stored.status == "resolved"
    assert stored.assigned_to == "wifi_team"
    assert stored.assigned_by == "a1"
    assert [h.status for h in stored.status_history] == ["open", "assigned", "in_progress", "resolved"]
    assert stored.updated_at == clock.now

    with pytest.raises(InvalidTransitionError):
        service.delete_issue(ADMIN, stored, confirmed=False)
    deleted = service.delete_issue(ADMIN, stored, confirmed=True)
    assert deleted.is_deleted
    assert service.get_issue(issue.id).status_history[-1].status == "deleted"


def test_lifecycle_requires_admin():
    service, _, _ = _sample_service(detector=_NullDetector())
    issue = service.submit_issue(STUDENT, "Router not responding", "", "Library")
    with pytest.raises(AuthorizationError):
        service.assign_issue(STUDENT, issue, "wifi_team")
    with pytest.raises(AuthorizationError):
        service.triage_queue(STUDENT)
    with pytest.raises(AuthorizationError):
        service.watch_triage(None, lambda board: None)
    assert service.get_issue(issue.id).status == "open"


def test_action_on_missing_issue():
    service, _, _ = _sample_service(detector=_NullDetector())
    issue = service.submit_issue(STUDENT, "Router not responding", "", "Library")
    issue.id = "missing"
    with pytest.raises(StoreError):
        service.assign_issue(ADMIN, issue, "wifi_team")


def test_concurrent_admin_writes_last_writer_wins():
    service, _, clock = _sample_service(detector=_NullDetector())
    issue = service.submit_issue(STUDENT, "Tap leaking", "", "Hostel A")
    issue = service.assign_issue(ADMIN, issue, "plumber")

    read_by_a1 = service.get_issue(issue.id)
    read_by_a2 = service.get_issue(issue.id)
    clock.tick(minutes=1)
    service.advance_issue(ADMIN, read_by_a1, "in_progress")
    clock.tick(minutes=1)
    service.advance_issue(ADMIN_TWO, read_by_a2, "resolved")

    final = service.get_issue(issue.id)
    assert final.status == "resolved"
    # the second write was built from a stale read, so the in_progress entry is gone
    assert [h.status for h in final.status_history] == ["open", "assigned", "resolved"]


def test_my_issues_scoped_and_hides_deleted():
    service, _, clock = _sample_service(detector=_NullDetector())
    mine = service.submit_issue(STUDENT, "Tap leaking", "", "Hostel A")
    clock.tick(minutes=1)
    newer = service.submit_issue(STUDENT, "Cupboard door broken", "", "Hostel A")
    service.submit_issue(OTHER_STUDENT, "Router not responding", "", "Library")

    assert [i.id for i in service.my_issues(STUDENT)] == [newer.id, mine.id]
    assert [i.id for i in service.my_issues(STUDENT, "priority")] == [mine.id, newer.id]

    mine = service.assign_issue(ADMIN, mine, "plumber")
    mine = service.advance_issue(ADMIN, mine, "resolved")
    service.delete_issue(ADMIN, mine, confirmed=True)
    assert [i.id for i in service.my_issues(STUDENT)] == [newer.id]


def test_triage_queue_and_watch():
    service, _, clock = _sample_service(detector=_NullDetector())
    old = service.submit_issue(STUDENT, "Cupboard door broken", "", "Hostel A")
    clock.tick(hours=30)
    urgent = service.submit_issue(STUDENT, "Internet down", "", "Library")

    queue = service.triage_queue(ADMIN)
    assert [i.id for i in queue] == [old.id, urgent.id]
    assert service.triage_queue(ADMIN, TriageFilters(category="wifi")) == [urgent]

    boards = []
    sub = service.watch_triage(ADMIN, lambda board: boards.append(len(board.view(now=clock.now))))
    assert boards == [2]
    service.assign_issue(ADMIN, urgent, "wifi_team")
    assert boards == [2, 2]
    sub.cancel()
    service.submit_issue(STUDENT, "Tap leaking", "", "Hostel A")
    assert boards == [2, 2]


def test_user_directory():
    directory = UserDirectory()
    directory.register("a1", "admin")
    assert directory.resolve("a1").is_admin
    with pytest.raises(AuthorizationError):
        directory.resolve("ghost")
    with pytest.raises(AuthorizationError):
        directory.resolve(None)
    with pytest.raises(ValueError):
        directory.register("x", "superuser")
