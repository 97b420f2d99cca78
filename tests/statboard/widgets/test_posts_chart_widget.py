from __future__ import annotations

from datetime import date

import pandas as pd
import plotly.graph_objs as go

from statboard.core.data_source import DataFrameSource, frame_from_records
from statboard.core.filter_state import FilterState
from statboard.core.filter_store import FilterStore
from statboard.widgets import PostsChartWidget, ViewsChartWidget


def _make_source() -> DataFrameSource:
    posts = frame_from_records(
        [
            {"published": True, "views": 10, "created_at": "2024-01-05 09:00"},
            {"published": False, "views": 0, "created_at": "2024-01-05 18:00"},
            {"published": True, "views": 30, "created_at": "2024-02-20 10:00"},
            {"published": False, "views": 2, "created_at": "2024-03-02 11:00"},
        ],
        parse_dates=["created_at"],
    )
    return DataFrameSource({"posts": posts})


def test_posts_chart_monthly_counts_with_published_subset():
    widget = PostsChartWidget(FilterStore(), _make_source(), strict=True)
    df = widget.compute_data(FilterState.empty())

    assert isinstance(df, pd.DataFrame)
    assert list(df["bucket"]) == ["2024-01", "2024-02", "2024-03"]
    assert list(df["all"]) == [2.0, 1.0, 1.0]
    # March has no published posts, filled with 0
    assert list(df["published"]) == [1.0, 1.0, 0.0]


def test_posts_chart_respects_date_range():
    widget = PostsChartWidget(FilterStore(), _make_source(), strict=True)
    state = FilterState.from_values({"start_date": date(2024, 2, 1)})

    df = widget.compute_data(state)

    assert list(df["bucket"]) == ["2024-02", "2024-03"]


def test_views_chart_sums_per_day():
    widget = ViewsChartWidget(FilterStore(), _make_source(), strict=True)
    df = widget.compute_data(FilterState.empty())

    assert list(df["bucket"]) == ["2024-01-05", "2024-02-20", "2024-03-02"]
    assert list(df["all"]) == [10.0, 30.0, 2.0]
    assert list(df["published"]) == [10.0, 30.0, 0.0]


def test_posts_chart_empty_range():
    widget = PostsChartWidget(FilterStore(), _make_source(), strict=True)
    state = FilterState.from_values({"start_date": date(2030, 1, 1)})

    df = widget.compute_data(state)
    assert df.empty

    fig = widget.render_figure(df, state)
    assert fig.layout.title.text == "No posts in the selected range"


def test_posts_chart_render_figure_basic():
    widget = PostsChartWidget(FilterStore(), _make_source(), strict=True)
    state = FilterState.empty()

    fig = widget.render_figure(widget.compute_data(state), state)

    assert isinstance(fig, go.Figure)
    assert [t.name for t in fig.data] == ["All", "Published"]
    assert fig.layout.xaxis.title.text == "Month"
