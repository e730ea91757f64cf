"""Chart builders (Altair) for the weekly report."""

from __future__ import annotations

import altair as alt
import pandas as pd


def counts_bar(counts: dict[str, int], field: str, title: str, color: str = "#1f77b4"):
    if not counts:
        return None
    df = pd.DataFrame({field: list(counts.keys()), "count": list(counts.values())})
    return (
        alt.Chart(df)
        .mark_bar(color=color)
        .encode(
            x=alt.X(f"{field}:N", title=title, sort="-y"),
            y=alt.Y("count:Q", title="Issues"),
            tooltip=[
                alt.Tooltip(f"{field}:N", title=title),
                alt.Tooltip("count:Q", title="Issues"),
            ],
        )
        .properties(height=240)
    )
