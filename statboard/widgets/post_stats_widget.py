from __future__ import annotations

from typing import Any, Dict

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from statboard.core.base_widget import WidgetBinding
from statboard.core.filter_state import FilterState
from statboard.core.query import Predicate


class PostStatsWidget(WidgetBinding):
    """
    Stat cards for the posts table.

    Shows:
      - total posts matching the filters
      - how many of those are published / drafts
      - average views per post

    All four numbers come from the same base query, so the date range is
    applied identically everywhere and the published/draft cards only add
    their own status constraint on top.
    """

    id = "post_stats"
    label = "Post Stats"
    source = "posts"
    views_field = "views"

    def compute_data(self, state: FilterState) -> Dict[str, Any]:
        base = self.base_query(state)
        status_field = self.builder.status_field

        published = self.builder.branch(base, [Predicate(status_field, "eq", True)])
        drafts = self.builder.branch(base, [Predicate(status_field, "eq", False)])
        avg_views = self.builder.with_aggregate(base, "average", self.views_field)

        return {
            "total": self.run(base),
            "published": self.run(published),
            "drafts": self.run(drafts),
            "avg_views": round(self.run(avg_views), 1),
        }

    def render_figure(self, data: Dict[str, Any], state: FilterState) -> go.Figure:
        if not data:
            return self.empty_figure("No data to show")

        cards = [
            ("Total posts", data["total"]),
            ("Published", data["published"]),
            ("Drafts", data["drafts"]),
            ("Avg. views", data["avg_views"]),
        ]

        fig = make_subplots(
            rows=1,
            cols=len(cards),
            specs=[[{"type": "indicator"}] * len(cards)],
        )
        for col, (title, value) in enumerate(cards, start=1):
            fig.add_trace(
                go.Indicator(mode="number", value=value, title={"text": title}),
                row=1,
                col=col,
            )

        fig.update_layout(
            height=220,
            margin=dict(l=20, r=20, t=40, b=20),
        )
        return fig
