"""Mapping persisted issue documents (camelCase) into IssueModel instances and back."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict
from typing import Any

import pandas as pd

from .classifier import urgency_to_score
from .models import HistoryEntry, IssueModel
from .timestamps import normalize_timestamp


def _map_history(raw: Any) -> list[HistoryEntry]:
    if not isinstance(raw, list):
        return []
    entries: list[HistoryEntry] = []
    for item in raw:
        if not isinstance(item, dict) or not item.get("status"):
            continue
        entries.append(
            HistoryEntry(
                status=str(item["status"]),
                at=normalize_timestamp(item.get("at")),
                note=item.get("note"),
            )
        )
    return entries


def history_to_documents(history: Iterable[HistoryEntry]) -> list[dict[str, Any]]:
    docs = []
    for entry in history:
        doc: dict[str, Any] = {"status": entry.status, "at": entry.at}
        if entry.note:
            doc["note"] = entry.note
        docs.append(doc)
    return docs


def _urgency_score(raw: dict[str, Any]) -> int | None:
    score = raw.get("urgencyScore")
    if score is None:
        return None
    try:
        return int(score)
    except (TypeError, ValueError):
        return None


def map_issue(raw: dict[str, Any]) -> IssueModel:
    """Build an IssueModel from a stored document; missing fields get safe defaults."""
    return IssueModel(
        id=raw.get("id"),
        title=raw.get("title") or "",
        description=raw.get("description") or "",
        category=raw.get("category") or "other",
        urgency=raw.get("urgency") or "medium",
        urgency_score=_urgency_score(raw),
        location=raw.get("location") or "",
        status=raw.get("status") or "open",
        created_by=raw.get("createdBy"),
        assigned_to=raw.get("assignedTo") or None,
        assigned_at=normalize_timestamp(raw.get("assignedAt")),
        assigned_by=raw.get("assignedBy"),
        status_history=_map_history(raw.get("statusHistory")),
        is_deleted=bool(raw.get("isDeleted", False)),
        deleted_at=normalize_timestamp(raw.get("deletedAt")),
        deleted_by=raw.get("deletedBy"),
        created_at=normalize_timestamp(raw.get("createdAt")),
        updated_at=normalize_timestamp(raw.get("updatedAt")),
        auto_reason=raw.get("autoReason"),
        possible_duplicate_of=raw.get("possibleDuplicateOf"),
        duplicate_group_id=raw.get("duplicateGroupId"),
        master_issue_id=raw.get("masterIssueId"),
        duplicates_count=int(raw.get("duplicatesCount") or 0),
    )


def issue_to_document(issue: IssueModel) -> dict[str, Any]:
    """Persisted shape of an issue. ``id`` is owned by the store and left out."""
    return {
        "title": issue.title,
        "description": issue.description,
        "category": issue.category,
        "urgency": issue.urgency,
        "urgencyScore": issue.urgency_score,
        "location": issue.location,
        "status": issue.status,
        "assignedTo": issue.assigned_to,
        "assignedAt": issue.assigned_at,
        "assignedBy": issue.assigned_by,
        "statusHistory": history_to_documents(issue.status_history),
        "isDeleted": issue.is_deleted,
        "deletedAt": issue.deleted_at,
        "deletedBy": issue.deleted_by,
        "createdBy": issue.created_by,
        "createdAt": issue.created_at,
        "updatedAt": issue.updated_at,
        "autoReason": issue.auto_reason,
        "possibleDuplicateOf": issue.possible_duplicate_of,
        "duplicateGroupId": issue.duplicate_group_id,
        "masterIssueId": issue.master_issue_id,
        "duplicatesCount": issue.duplicates_count,
    }


def issues_to_dataframe(issues: Iterable[IssueModel]) -> pd.DataFrame:
    rows = []
    for i in issues:
        row = asdict(i)
        if row["urgency_score"] is None:
            row["urgency_score"] = urgency_to_score(i.urgency)
        rows.append(row)
    df = pd.DataFrame(rows)
    for col in ("created_at", "updated_at", "assigned_at", "deleted_at"):
        if col in df.columns:
            df[col] = pd.to_datetime(df[col], utc=True, errors="coerce")
    return df
