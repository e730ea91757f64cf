"""Timestamp helpers: everything inside the engine is timezone-aware UTC."""

from __future__ import annotations

from datetime import datetime

import pandas as pd
import pytz


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def normalize_timestamp(value, target_tz=pytz.UTC) -> datetime | None:
    """Normalize a timestamp-like value into ``target_tz``.

    Accepts ``datetime``, ``pd.Timestamp``, ISO strings and epoch
    milliseconds. Naive values are taken as UTC. Returns None when the input
    cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        ts = pd.to_datetime(value, unit="ms", utc=True, errors="coerce")
    else:
        ts = pd.to_datetime(value, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    try:
        if getattr(ts, "tzinfo", None) is None:
            ts = ts.tz_localize(pytz.UTC)
        return ts.tz_convert(target_tz).to_pydatetime()
    except (TypeError, ValueError):
        return None


def hours_between(start: datetime | None, end: datetime) -> float:
    """Elapsed hours from ``start`` to ``end``; a missing start counts as zero elapsed."""
    if start is None:
        return 0.0
    return (end - start).total_seconds() / 3600.0
