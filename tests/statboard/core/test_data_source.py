from __future__ import annotations

from datetime import date

import pandas as pd
import pytest

from statboard.core.data_source import DataFrameSource, frame_from_records
from statboard.core.exceptions import DataSourceError
from statboard.core.query import Predicate


def _make_source() -> DataFrameSource:
    posts = frame_from_records(
        [
            {"id": 1, "published": True, "views": 10, "created_at": "2024-01-05 10:00"},
            {"id": 2, "published": False, "views": 0, "created_at": "2024-01-31 23:30"},
            {"id": 3, "published": True, "views": 30, "created_at": "2024-02-10 08:00"},
            {"id": 4, "published": True, "views": 20, "created_at": "2024-03-01 12:00"},
        ],
        parse_dates=["created_at"],
    )
    return DataFrameSource({"posts": posts})


def test_count_without_predicates():
    assert _make_source().count("posts", []) == 4


def test_inclusive_end_date_keeps_rows_later_that_day():
    src = _make_source()
    preds = [
        Predicate("created_at", "ge", date(2024, 1, 1)),
        Predicate("created_at", "le", date(2024, 1, 31)),
    ]
    assert src.count("posts", preds) == 2


def test_status_predicate():
    src = _make_source()
    assert src.count("posts", [Predicate("published", "eq", True)]) == 3
    assert src.count("posts", [Predicate("published", "eq", False)]) == 1


def test_sum_and_average():
    src = _make_source()
    published = [Predicate("published", "eq", True)]
    assert src.aggregate("posts", published, "sum", "views") == 60.0
    assert src.aggregate("posts", published, "average", "views") == 20.0


def test_average_of_nothing_is_zero():
    src = _make_source()
    preds = [Predicate("created_at", "ge", date(2030, 1, 1))]
    assert src.aggregate("posts", preds, "average", "views") == 0.0


def test_series_by_month_is_ordered():
    series = _make_source().series_aggregate("posts", [], "month", "count", None)
    assert series == [("2024-01", 2.0), ("2024-02", 1.0), ("2024-03", 1.0)]


def test_series_sum_by_day():
    series = _make_source().series_aggregate(
        "posts", [Predicate("published", "eq", True)], "day", "sum", "views"
    )
    assert series == [("2024-01-05", 10.0), ("2024-02-10", 30.0), ("2024-03-01", 20.0)]


def test_series_by_year_and_hour_labels():
    src = _make_source()
    assert src.series_aggregate("posts", [], "year", "count", None) == [("2024", 4.0)]
    hourly = src.series_aggregate("posts", [], "hour", "count", None)
    assert hourly[0] == ("2024-01-05 10:00", 1.0)


def test_empty_series():
    src = _make_source()
    preds = [Predicate("created_at", "ge", date(2030, 1, 1))]
    assert src.series_aggregate("posts", preds, "day", "count", None) == []


def test_in_operator():
    src = _make_source()
    assert src.count("posts", [Predicate("id", "in", [1, 3])]) == 2


def test_unknown_source_and_field_raise():
    src = _make_source()
    with pytest.raises(DataSourceError):
        src.count("comments", [])
    with pytest.raises(DataSourceError):
        src.count("posts", [Predicate("author", "eq", "sam")])
    with pytest.raises(DataSourceError):
        src.aggregate("posts", [], "sum", "likes")


def test_sources_lists_frames():
    src = DataFrameSource({"b": pd.DataFrame(), "a": pd.DataFrame()})
    assert src.sources == ["a", "b"]
