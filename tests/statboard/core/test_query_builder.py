from __future__ import annotations

from datetime import date

import pytest

from statboard.core.exceptions import InvalidIntervalError, InvalidRangeError, ValidationError
from statboard.core.filter_state import FilterState
from statboard.core.query import AggregateQuery, AggregateQueryBuilder, Predicate, TimeSeriesQuery


def _q1_state() -> FilterState:
    return FilterState.from_values({"start_date": date(2024, 1, 1), "end_date": date(2024, 3, 31)})


def test_base_without_filters_has_no_predicates():
    q = AggregateQueryBuilder().base("posts", FilterState.empty())
    assert q == AggregateQuery(source="posts")


def test_base_date_range_predicates():
    q = AggregateQueryBuilder().base("posts", _q1_state())
    assert q.predicates == (
        Predicate("created_at", "ge", date(2024, 1, 1)),
        Predicate("created_at", "le", date(2024, 3, 31)),
    )


def test_base_uses_configured_columns():
    builder = AggregateQueryBuilder(date_field="posted_on", status_field="is_live")
    state = _q1_state().with_updated("published_status", "1")
    fields = {p.field for p in builder.base("posts", state).predicates}
    assert fields == {"posted_on", "is_live"}


def test_branches_share_identical_date_predicates():
    builder = AggregateQueryBuilder()
    base = builder.base("posts", _q1_state())

    published = builder.branch(base, [Predicate("published", "eq", True)])
    drafts = builder.branch(base, [Predicate("published", "eq", False)])

    for branched in (published, drafts):
        assert branched.predicates[: len(base.predicates)] == base.predicates
    assert published.predicates[-1] == Predicate("published", "eq", True)
    assert drafts.predicates[-1] == Predicate("published", "eq", False)


def test_branch_does_not_mutate_input():
    builder = AggregateQueryBuilder()
    base = builder.base("posts", _q1_state())
    before = base.predicates

    builder.branch(base, [Predicate("published", "eq", True)])

    assert base.predicates == before
    assert len(base.predicates) == 2


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        ("", None),
        ("1", True),
        (True, True),
        ("0", False),
        (False, False),
    ],
)
def test_published_status_tri_state(raw, expected):
    state = FilterState.empty() if raw is None else FilterState.from_values({"published_status": raw})
    q = AggregateQueryBuilder().base("posts", state)

    status = [p for p in q.predicates if p.field == "published"]
    if expected is None:
        assert status == []
    else:
        assert status == [Predicate("published", "eq", expected)]


def test_unknown_published_status_is_a_validation_error():
    state = FilterState.from_values({"published_status": "maybe"})
    with pytest.raises(ValidationError) as exc:
        AggregateQueryBuilder().base("posts", state)
    assert exc.value.issues[0].field == "published_status"


def test_unrecognised_filters_are_ignored():
    state = FilterState.from_values({"category": "news", "author": "sam"})
    assert AggregateQueryBuilder().base("posts", state).predicates == ()


def test_iso_string_dates_are_accepted():
    state = FilterState.from_values({"start_date": "2024-01-01"})
    q = AggregateQueryBuilder().base("posts", state)
    assert q.predicates == (Predicate("created_at", "ge", date(2024, 1, 1)),)


def test_start_after_end_raises_invalid_range():
    state = FilterState.from_values({"start_date": date(2024, 6, 1), "end_date": date(2024, 1, 1)})
    with pytest.raises(InvalidRangeError):
        AggregateQueryBuilder().base("posts", state)


def test_bucketed_keeps_predicates_and_sets_interval():
    builder = AggregateQueryBuilder()
    base = builder.base("posts", _q1_state())

    series = builder.bucketed(base, "month")

    assert isinstance(series, TimeSeriesQuery)
    assert series.interval == "month"
    assert series.predicates == base.predicates
    assert series.date_field == "created_at"


@pytest.mark.parametrize("interval", ["week", "minute", ""])
def test_bucketed_rejects_unknown_interval(interval):
    builder = AggregateQueryBuilder()
    with pytest.raises(InvalidIntervalError):
        builder.bucketed(builder.base("posts", FilterState.empty()), interval)


def test_with_aggregate_swaps_fn_but_keeps_predicates():
    builder = AggregateQueryBuilder()
    base = builder.base("posts", _q1_state())
    avg = builder.with_aggregate(base, "average", "views")

    assert avg.aggregate_fn == "average"
    assert avg.field == "views"
    assert avg.predicates == base.predicates


def test_sum_without_field_is_rejected():
    with pytest.raises(ValueError):
        AggregateQuery(source="posts", aggregate_fn="sum")
