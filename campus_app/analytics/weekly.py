"""Weekly aggregation for the operations report (pure functions)."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

import pandas as pd

from campus_app.core.config import REPORT_TOP_HOTSPOTS, REPORT_WINDOW_DAYS
from campus_app.core.errors import NarrationError
from campus_app.core.mappers import issues_to_dataframe
from campus_app.core.models import IssueModel, UserContext
from campus_app.core.narration import NarrationClient
from campus_app.core.sla import sla_display
from campus_app.core.timestamps import utc_now

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WeeklyReport:
    stats: dict[str, Any]
    summary: str
    narration: str = ""
    narration_error: str | None = None
    generated_at: datetime | None = None
    hotspots: list[dict[str, Any]] = field(default_factory=list)


def _counts(series: pd.Series) -> dict[str, int]:
    if series.empty:
        return {}
    return {str(k): int(v) for k, v in series.value_counts().items()}


def _resolved_at(history: list[dict]) -> datetime | None:
    for entry in history or []:
        if entry.get("status") == "resolved":
            return entry.get("at")
    return None


def build_weekly_stats(issues: Iterable[IssueModel], now: datetime | None = None) -> dict[str, Any]:
    """Aggregate counts for the trailing reporting window.

    Soft-deleted issues are excluded everywhere. Category, urgency, location
    and hotspot counts cover issues created inside the window; ``slaBreaches``
    covers every active issue; ``resolvedThisWeek`` counts resolutions that
    happened inside the window regardless of creation date.
    """
    now = now or utc_now()
    issues = [i for i in issues if not i.is_deleted]
    since = now - timedelta(days=REPORT_WINDOW_DAYS)
    stats: dict[str, Any] = {
        "windowDays": REPORT_WINDOW_DAYS,
        "totalIssues": 0,
        "openIssues": 0,
        "byCategory": {},
        "byUrgency": {},
        "byLocation": {},
        "topHotspots": [],
        "slaBreaches": 0,
        "resolvedThisWeek": 0,
    }
    if not issues:
        return stats

    df = issues_to_dataframe(issues)
    stats["openIssues"] = int((df["status"] != "resolved").sum())
    stats["slaBreaches"] = sum(
        1 for i in issues if i.status != "resolved" and sla_display(i, now).state == "breached"
    )

    resolved_at = pd.to_datetime(df["status_history"].apply(_resolved_at), utc=True, errors="coerce")
    stats["resolvedThisWeek"] = int(((resolved_at >= since) & (resolved_at <= now)).sum())

    recent = df[(df["created_at"] >= since) & (df["created_at"] <= now)]
    stats["totalIssues"] = int(len(recent))
    stats["byCategory"] = _counts(recent["category"])
    stats["byUrgency"] = _counts(recent["urgency"])
    stats["byLocation"] = _counts(recent["location"])
    if not recent.empty:
        top = recent["location"].value_counts().head(REPORT_TOP_HOTSPOTS)
        stats["topHotspots"] = [{"location": str(loc), "count": int(n)} for loc, n in top.items()]
    return stats


def summarize_stats(stats: dict[str, Any]) -> str:
    """Accurate plain-text summary shown whether or not narration succeeds."""
    lines = [
        f"Issues reported in the last {stats.get('windowDays', REPORT_WINDOW_DAYS)} days: "
        f"{stats.get('totalIssues', 0)}",
        f"Currently open: {stats.get('openIssues', 0)}",
        f"Resolved this week: {stats.get('resolvedThisWeek', 0)}",
        f"SLA breaches: {stats.get('slaBreaches', 0)}",
    ]
    by_category = stats.get("byCategory") or {}
    if by_category:
        parts = ", ".join(f"{k}: {v}" for k, v in sorted(by_category.items(), key=lambda kv: -kv[1]))
        lines.append(f"By category: {parts}")
    hotspots = stats.get("topHotspots") or []
    if hotspots:
        lines.append("Hotspots: " + ", ".join(f"{h['location']} ({h['count']})" for h in hotspots))
    return "\n".join(lines)


def build_weekly_report(
    issues: Iterable[IssueModel],
    user: UserContext | None,
    client: NarrationClient | None,
    now: datetime | None = None,
) -> WeeklyReport:
    """Stats and summary always; narration when the report function succeeds."""
    now = now or utc_now()
    stats = build_weekly_stats(issues, now)
    report = WeeklyReport(
        stats=stats,
        summary=summarize_stats(stats),
        generated_at=now,
        hotspots=list(stats.get("topHotspots") or []),
    )
    if client is None:
        report.narration_error = "Narration is not configured"
        return report
    try:
        report.narration = client.generate(stats, user)
    except NarrationError as exc:
        logger.warning("Weekly narration unavailable: %s", exc)
        report.narration_error = str(exc)
    return report
