from __future__ import annotations

from typing import Optional

import pandas as pd
import plotly.graph_objects as go

from statboard.core.base_widget import WidgetBinding
from statboard.core.filter_state import FilterState
from statboard.core.query import Predicate


class PostsChartWidget(WidgetBinding):
    """
    Time-series chart: posts per bucket, with the published subset as a second line.
    """

    id = "posts_chart"
    label = "Posts per month"
    source = "posts"
    interval = "month"
    aggregate_fn = "count"
    value_field: Optional[str] = None
    y_title = "Posts"

    def compute_data(self, state: FilterState) -> pd.DataFrame:
        base = self.base_query(state, aggregate_fn=self.aggregate_fn, field=self.value_field)
        published = self.builder.branch(base, [Predicate(self.builder.status_field, "eq", True)])

        all_series = self.run_series(self.builder.bucketed(base, self.interval))
        published_series = dict(self.run_series(self.builder.bucketed(published, self.interval)))

        if not all_series:
            return pd.DataFrame(columns=["bucket", "all", "published"])

        return pd.DataFrame(
            {
                "bucket": [label for label, _ in all_series],
                "all": [value for _, value in all_series],
                "published": [published_series.get(label, 0.0) for label, _ in all_series],
            }
        )

    def render_figure(self, data: pd.DataFrame, state: FilterState) -> go.Figure:
        if data is None or data.empty:
            return self.empty_figure("No posts in the selected range")

        fig = go.Figure()
        fig.add_trace(go.Bar(x=data["bucket"], y=data["all"], name="All"))
        fig.add_trace(go.Scatter(x=data["bucket"], y=data["published"], name="Published", mode="lines+markers"))

        fig.update_layout(
            height=400,
            margin=dict(l=40, r=40, t=40, b=40),
            title=self.label,
            xaxis_title=self.interval.capitalize(),
            yaxis_title=self.y_title,
            legend_title="Status",
        )
        return fig


class ViewsChartWidget(PostsChartWidget):
    """Total views per day for the filtered posts."""

    id = "views_chart"
    label = "Views per day"
    interval = "day"
    aggregate_fn = "sum"
    value_field = "views"
    y_title = "Views"
