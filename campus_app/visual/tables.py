"""Reusable table helpers for Streamlit rendering."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import pandas as pd
import pytz
import streamlit as st

from campus_app.core.column_config import get_columns
from campus_app.core.config import SETTINGS, TIMEZONE
from campus_app.core.mappers import issues_to_dataframe
from campus_app.core.models import IssueModel
from campus_app.core.sla import sla_display, sla_flag
from campus_app.core.status import assigned_label, status_label
from campus_app.visual.column_metadata import apply_column_metadata


def issues_table(issues: Iterable[IssueModel], now: datetime | None = None) -> pd.DataFrame:
    """Flatten issues for display, keeping the incoming order.

    Adds ``sla_flag``, ``sla_label`` and ``sla_tier`` and swaps raw status and
    staff-role values for their labels.
    """
    issues = list(issues)
    if not issues:
        return pd.DataFrame()
    df = issues_to_dataframe(issues)
    displays = [sla_display(i, now) for i in issues]
    df["sla_flag"] = [sla_flag(i, now) for i in issues]
    df["sla_label"] = [d.label for d in displays]
    df["sla_tier"] = [d.color_tier for d in displays]
    df["status"] = df["status"].apply(status_label)
    df["assigned_to"] = df["assigned_to"].apply(assigned_label)
    tz = pytz.timezone(TIMEZONE)
    for col in ("created_at", "updated_at"):
        if col in df.columns:
            df[col] = df[col].dt.tz_convert(tz)
    return df


def prepare_issue_table(
    df: pd.DataFrame,
    set_name: str,
    *,
    extra_columns: list[str] | None = None,
) -> tuple[pd.DataFrame, list[str]]:
    if df.empty:
        return df, []
    display_cols = [col for col in get_columns(set_name) if col in df.columns]
    for col in extra_columns or []:
        if col in df.columns and col not in display_cols:
            display_cols.append(col)
    if not display_cols:
        display_cols = [col for col in df.columns if col != "id"]
    return df, display_cols


def render_issue_table(df: pd.DataFrame, set_name: str, limit: int | None = None):
    table, cols = prepare_issue_table(df, set_name)
    if not cols:
        st.info("No issues found.")
        return
    limit = limit or SETTINGS.max_table_rows
    st.dataframe(table[cols].head(limit), hide_index=True, column_config=apply_column_metadata(cols))
