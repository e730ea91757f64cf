"""Domain data models for campus issues, history entries, and users."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True, frozen=True)
class HistoryEntry:
    status: str
    at: datetime | None
    note: str | None = None


@dataclass(slots=True)
class IssueModel:
    id: str | None
    title: str
    description: str
    category: str
    urgency: str
    urgency_score: int | None
    location: str
    status: str
    created_by: str | None
    assigned_to: str | None = None
    assigned_at: datetime | None = None
    assigned_by: str | None = None
    status_history: list[HistoryEntry] = field(default_factory=list)
    is_deleted: bool = False
    deleted_at: datetime | None = None
    deleted_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    auto_reason: str | None = None

    # Duplicate tracking (advisory only)
    possible_duplicate_of: str | None = None
    duplicate_group_id: str | None = None
    master_issue_id: str | None = None
    duplicates_count: int = 0


@dataclass(slots=True, frozen=True)
class Classification:
    category: str
    urgency: str
    reason: str


@dataclass(slots=True, frozen=True)
class SlaDisplay:
    state: str  # "remaining" | "breached" | "complete" | "deleted"
    label: str
    color_tier: str


@dataclass(slots=True, frozen=True)
class UserContext:
    uid: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
