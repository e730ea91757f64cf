"""Central column metadata and helpers for table rendering."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import streamlit as st

# Mapping of raw column keys to (label, help text, format key)
# format key: "int" -> integer, "datetime" -> timestamp, None -> default text column
COLUMN_METADATA: dict[str, tuple[str, str, str | None]] = {
    "title": ("Title", "Short summary written by the reporter.", None),
    "description": ("Description", "Full issue description.", None),
    "category": ("Category", "Category assigned by the auto-classifier.", None),
    "urgency": ("Urgency", "Urgency assigned by the auto-classifier.", None),
    "urgency_score": ("Urgency Score", "3 = high, 2 = medium, 1 = low.", "int"),
    "location": ("Location", "Campus zone where the issue was reported.", None),
    "status": ("Status", "Current lifecycle status.", None),
    "assigned_to": ("Assigned To", "Staff team responsible for the fix.", None),
    "created_at": ("Reported", "When the issue was submitted.", "datetime"),
    "updated_at": ("Updated", "Most recent change to the issue.", "datetime"),
    "sla_flag": ("SLA", "on-time, delayed (open > 24h) or overdue (assigned > 48h).", None),
    "sla_label": ("SLA Timer", "Time left before the next SLA deadline, or how long it has been breached.", None),
    "possible_duplicate_of": ("Possible Duplicate Of", "Recent similar report at the same location.", None),
    "auto_reason": ("Auto-tagging", "Why the classifier picked this category and urgency.", None),
    "duplicates_count": ("Duplicates", "Later reports linked to this issue.", "int"),
}


def apply_column_metadata(
    columns: Iterable[str],
    existing: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Return a column_config dictionary with human labels and hover help."""

    config: dict[str, Any] = dict(existing or {})
    for col in columns:
        if col in config:
            continue
        meta = COLUMN_METADATA.get(col)
        if not meta:
            continue
        label, help_text, fmt = meta
        if fmt == "int":
            config[col] = st.column_config.NumberColumn(label, help=help_text, format="%d")
        elif fmt == "datetime":
            config[col] = st.column_config.DatetimeColumn(label, help=help_text, format="D MMM, HH:mm")
        else:
            config[col] = st.column_config.Column(label, help=help_text)
    return config
