"""Central configuration, constants, and shared column definitions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

# =============================================================================
# Locale
# =============================================================================
TIMEZONE = "Asia/Kolkata"

# =============================================================================
# Issue Vocabulary
# =============================================================================
CATEGORIES: Sequence[str] = (
    "water",
    "electricity",
    "wifi",
    "mess",
    "maintenance",
    "other",
)

URGENCIES: Sequence[str] = ("low", "medium", "high")

# Denormalized onto every issue as ``urgencyScore`` for ordering
URGENCY_SCORES: dict[str, int] = {
    "high": 3,
    "medium": 2,
    "low": 1,
}
DEFAULT_URGENCY_SCORE = 1

# Canonical lifecycle order; "deleted" only ever appears in history
STATUS_ORDER: Sequence[str] = (
    "open",
    "assigned",
    "in_progress",
    "resolved",
)
DELETED_HISTORY_STATUS = "deleted"
MERGED_STATUS = "merged"

STATUS_LABELS: dict[str, str] = {
    "open": "Open",
    "assigned": "Assigned",
    "in_progress": "In Progress",
    "resolved": "Resolved",
    "merged": "Merged",
}

# =============================================================================
# Staff Roles
# =============================================================================
STAFF_ROLES: Sequence[str] = (
    "plumber",
    "electrician",
    "wifi_team",
    "mess_supervisor",
    "maintenance",
)

STAFF_ROLE_LABELS: dict[str, str] = {
    "plumber": "Plumber",
    "electrician": "Electrician",
    "wifi_team": "WiFi/Network Team",
    "mess_supervisor": "Mess Supervisor",
    "maintenance": "Maintenance/Carpenter",
}

# Default pick in the assign control
CATEGORY_STAFF_ROLES: dict[str, str] = {
    "water": "plumber",
    "electricity": "electrician",
    "wifi": "wifi_team",
    "mess": "mess_supervisor",
    "maintenance": "maintenance",
}

USER_ROLES: frozenset[str] = frozenset({"student", "admin"})

# =============================================================================
# SLA Targets
# =============================================================================
SLA_OPEN_HOURS: int = 24  # open -> assigned
SLA_ASSIGNED_HOURS: int = 48  # assigned -> resolved

SLA_ON_TIME = "on-time"
SLA_DELAYED = "delayed"
SLA_OVERDUE = "overdue"

# =============================================================================
# Duplicate Detection
# =============================================================================
DUPLICATE_WINDOW_HOURS: int = 12
DUPLICATE_CANDIDATE_LIMIT: int = 25
DUPLICATE_THRESHOLD: float = 0.45
FINGERPRINT_WORD_COUNT: int = 6
FINGERPRINT_MIN_WORD_LENGTH: int = 4

# Electricity reports describe the same hazard in many ways
ELECTRICITY_SYNONYMS: dict[str, str] = {
    "short circuit": "spark",
    "burning smell": "spark",
    "sparking": "spark",
    "sparks": "spark",
    "shock": "spark",
}

# =============================================================================
# Weekly Report
# =============================================================================
REPORT_WINDOW_DAYS: int = 7
REPORT_TOP_HOTSPOTS: int = 3
NARRATION_MODEL_NAME = "gemini-1.5-flash"

# =============================================================================
# Display Columns
# =============================================================================
ISSUE_CORE_COLUMNS: Sequence[str] = (
    "id",
    "title",
    "description",
    "category",
    "urgency",
    "urgency_score",
    "location",
    "status",
    "assigned_to",
    "created_by",
    "created_at",
    "updated_at",
    "is_deleted",
)

DISPLAY_ORDER_TRIAGE: Sequence[str] = (
    "title",
    "sla_flag",
    "sla_label",
    "urgency",
    "category",
    "location",
    "status",
    "assigned_to",
    "created_at",
    "possible_duplicate_of",
    "auto_reason",
)

DISPLAY_ORDER_STUDENT: Sequence[str] = (
    "title",
    "status",
    "category",
    "urgency",
    "location",
    "assigned_to",
    "created_at",
    "auto_reason",
)


@dataclass(slots=True)
class AppSettings:
    max_table_rows: int = 500
    download_encoding: str = "utf-8"


SETTINGS = AppSettings()
