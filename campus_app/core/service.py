"""IssueService: orchestrates submission, lifecycle actions, and triage views."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from .classifier import classify, urgency_to_score
from .duplicates import DuplicateCandidate, DuplicateDetector, duplicate_group_id
from .errors import StoreError, ValidationError
from .identity import require_admin, require_user
from .lifecycle import IssueUpdate, advance, apply_update, assign, new_issue_history, soft_delete
from .mappers import history_to_documents, map_issue
from .models import IssueModel, UserContext
from .store import SERVER_TIMESTAMP, IssueStore, Query, Subscription
from .timestamps import utc_now
from .triage import TriageBoard, TriageFilters, sort_student_view, triage_queue

BoardCallback = Callable[[TriageBoard], None]

ALL_ISSUES_QUERY = Query().ordered("createdAt", descending=True)


class IssueService:
    def __init__(
        self,
        store: IssueStore,
        *,
        detector: DuplicateDetector | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.store = store
        self.detector = detector or DuplicateDetector(store)
        self._clock = clock or utc_now
        self._logger = logging.getLogger(__name__)

    # ------------------ Submission ------------------
    def submit_issue(
        self,
        user: UserContext | None,
        title: str,
        description: str,
        location: str,
    ) -> IssueModel:
        """Validate, classify, check for duplicates, and persist a new issue.

        Validation runs before anything touches the store. The duplicate check
        is advisory: when it fails the issue is stored without a link.
        """
        user = require_user(user)
        title = (title or "").strip()
        description = (description or "").strip()
        location = (location or "").strip()
        if not title:
            raise ValidationError("Title is required")
        if not location:
            raise ValidationError("Location is required")

        now = self._clock()
        result = classify(title, description)
        candidate = DuplicateCandidate(
            category=result.category,
            location=location,
            title=title,
            description=description,
        )
        duplicate_of = self.detector.lookup(candidate, now=now)
        master_id = self._master_for(duplicate_of) if duplicate_of else None

        doc = {
            "title": title,
            "description": description,
            "category": result.category,
            "urgency": result.urgency,
            "urgencyScore": urgency_to_score(result.urgency),
            "location": location,
            "status": "open",
            "assignedTo": None,
            "statusHistory": history_to_documents(new_issue_history(now)),
            "isDeleted": False,
            "createdBy": user.uid,
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
            "autoReason": result.reason,
            "possibleDuplicateOf": duplicate_of,
            "duplicateGroupId": duplicate_group_id(result.category, location, title, description),
            "masterIssueId": master_id,
            "duplicatesCount": 0,
        }
        issue_id = self.store.add(doc)
        self._logger.info(
            "Issue %s submitted by %s (%s/%s)", issue_id, user.uid, result.category, result.urgency
        )
        if master_id:
            self._bump_duplicates_count(master_id)
        return self.get_issue(issue_id)

    def _master_for(self, duplicate_id: str) -> str:
        try:
            doc = self.store.get(duplicate_id)
        except Exception as exc:
            self._logger.warning("Could not read duplicate %s: %s", duplicate_id, exc)
            return duplicate_id
        if doc and doc.get("masterIssueId"):
            return doc["masterIssueId"]
        return duplicate_id

    def _bump_duplicates_count(self, master_id: str) -> None:
        try:
            doc = self.store.get(master_id)
            if doc is None:
                return
            self.store.update(master_id, {"duplicatesCount": int(doc.get("duplicatesCount") or 0) + 1})
        except Exception as exc:
            self._logger.warning("Failed to update duplicate count on %s: %s", master_id, exc)

    # ------------------ Reads ------------------
    def get_issue(self, issue_id: str) -> IssueModel:
        doc = self.store.get(issue_id)
        if doc is None:
            raise StoreError(f"Issue {issue_id} not found")
        return map_issue(doc)

    def list_all(self) -> list[IssueModel]:
        return [map_issue(doc) for doc in self.store.query(ALL_ISSUES_QUERY)]

    def my_issues(self, user: UserContext | None, sort_mode: str = "newest") -> list[IssueModel]:
        user = require_user(user)
        query = Query().where("createdBy", "==", user.uid).ordered("createdAt", descending=True)
        issues = [map_issue(doc) for doc in self.store.query(query)]
        return sort_student_view(issues, sort_mode)

    def triage_queue(
        self,
        user: UserContext | None,
        filters: TriageFilters | None = None,
        now: datetime | None = None,
    ) -> list[IssueModel]:
        require_admin(user)
        return triage_queue(self.list_all(), filters, now or self._clock())

    def watch_triage(self, user: UserContext | None, callback: BoardCallback) -> Subscription:
        """Live admin board; ``callback`` gets the reduced board on every snapshot."""
        require_admin(user)
        board = TriageBoard()
        return self.store.subscribe(ALL_ISSUES_QUERY, lambda snap: callback(board.apply_snapshot(snap)))

    # ------------------ Lifecycle ------------------
    def assign_issue(self, user: UserContext | None, issue: IssueModel, staff_role: str) -> IssueModel:
        admin = require_admin(user)
        return self._commit(issue, assign(issue, staff_role, admin.uid, self._clock()))

    def advance_issue(self, user: UserContext | None, issue: IssueModel, next_status: str) -> IssueModel:
        admin = require_admin(user)
        return self._commit(issue, advance(issue, next_status, admin.uid, self._clock()))

    def delete_issue(self, user: UserContext | None, issue: IssueModel, *, confirmed: bool) -> IssueModel:
        admin = require_admin(user)
        return self._commit(issue, soft_delete(issue, admin.uid, confirmed=confirmed, now=self._clock()))

    def _commit(self, issue: IssueModel, update: IssueUpdate) -> IssueModel:
        """Write ``update`` built from the caller's read of ``issue``; no retry."""
        try:
            self.store.update(update.issue_id, update.to_document_fields())
        except StoreError:
            self._logger.error("Store rejected %s on issue %s", update.action, issue.id)
            raise
        except Exception as exc:
            self._logger.error("Failed to %s issue %s: %s", update.action, issue.id, exc)
            raise StoreError(f"Failed to {update.action} issue {issue.id}: {exc}") from exc
        self._logger.info("Issue %s: %s -> %s", issue.id, issue.status, update.entry.status)
        return apply_update(issue, update)
