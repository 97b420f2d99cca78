from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Iterable, Optional, Tuple

from .exceptions import InvalidIntervalError, InvalidRangeError, ValidationError, ValidationIssue
from .filter_state import END_DATE, PUBLISHED_STATUS, START_DATE, FilterState

AGGREGATE_FNS = ("count", "sum", "average")
INTERVALS = ("hour", "day", "month", "year")
OPERATORS = ("eq", "ne", "ge", "le", "gt", "lt", "in")

_TRUE_TOKENS = ("1", "true")
_FALSE_TOKENS = ("0", "false")


@dataclass(frozen=True)
class Predicate:
    """Single (field, op, value) constraint."""
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in OPERATORS:
            raise ValueError(f"Unsupported operator '{self.op}'")


@dataclass(frozen=True)
class AggregateQuery:
    """
    Declarative description of one aggregate over a source.

    :param source: name of the collection/table
    :param predicates: ordered constraints, shared filters first
    :param aggregate_fn: count | sum | average
    :param field: target column for sum/average
    """
    source: str
    predicates: Tuple[Predicate, ...] = ()
    aggregate_fn: str = "count"
    field: Optional[str] = None

    def __post_init__(self) -> None:
        if self.aggregate_fn not in AGGREGATE_FNS:
            raise ValueError(f"Unsupported aggregate '{self.aggregate_fn}'")
        if self.aggregate_fn != "count" and not self.field:
            raise ValueError(f"Aggregate '{self.aggregate_fn}' needs a target field")


@dataclass(frozen=True)
class TimeSeriesQuery(AggregateQuery):
    interval: str = "day"
    date_field: str = "created_at"


class AggregateQueryBuilder:
    """
    Turns a {@link FilterState} into {@link AggregateQuery} descriptions.

    Recognised filters:
    - start_date: inclusive lower bound on the date field
    - end_date: inclusive upper bound on the date field
    - published_status: tri-state, absent = no constraint, "1"/True = published,
      "0"/False = not published

    Unknown filter names are ignored. The builder never does any I/O; running a
    query is the data source's job.
    """

    def __init__(self, date_field: str = "created_at", status_field: str = "published"):
        self.date_field = date_field
        self.status_field = status_field

    def base(
        self,
        source: str,
        state: FilterState,
        *,
        aggregate_fn: str = "count",
        field: Optional[str] = None,
    ) -> AggregateQuery:
        predicates: list[Predicate] = []

        start = _as_date(state.get(START_DATE), START_DATE)
        end = _as_date(state.get(END_DATE), END_DATE)
        if start is not None and end is not None and start > end:
            raise InvalidRangeError(start, end)

        if start is not None:
            predicates.append(Predicate(self.date_field, "ge", start))
        if end is not None:
            predicates.append(Predicate(self.date_field, "le", end))

        published = parse_tri_state(state.get(PUBLISHED_STATUS))
        if published is not None:
            predicates.append(Predicate(self.status_field, "eq", published))

        return AggregateQuery(
            source=source,
            predicates=tuple(predicates),
            aggregate_fn=aggregate_fn,
            field=field,
        )

    @staticmethod
    def branch(query: AggregateQuery, extra_predicates: Iterable[Predicate]) -> AggregateQuery:
        """
        Clone 'query' and append extra constraints. Shared predicates always
        come first and are never replaced.
        """
        return replace(query, predicates=tuple(query.predicates) + tuple(extra_predicates))

    @staticmethod
    def with_aggregate(
        query: AggregateQuery, aggregate_fn: str, field: Optional[str] = None
    ) -> AggregateQuery:
        return replace(query, aggregate_fn=aggregate_fn, field=field)

    def bucketed(self, query: AggregateQuery, interval: str) -> TimeSeriesQuery:
        if interval not in INTERVALS:
            raise InvalidIntervalError(
                f"Unsupported interval '{interval}', expected one of {', '.join(INTERVALS)}"
            )
        return TimeSeriesQuery(
            source=query.source,
            predicates=query.predicates,
            aggregate_fn=query.aggregate_fn,
            field=query.field,
            interval=interval,
            date_field=self.date_field,
        )


def parse_tri_state(value: Any) -> Optional[bool]:
    """None/"" -> None, "1"/True -> True, "0"/False -> False. Anything else is invalid."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    token = str(value).strip().lower()
    if token == "":
        return None
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    raise ValidationError(
        [
            ValidationIssue(
                "STATUS_VALUE",
                f"Unknown published status '{value}'.",
                field=PUBLISHED_STATUS,
            )
        ]
    )


def _as_date(value: Any, name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(
            [ValidationIssue("DATE_FORMAT", f"'{value}' is not a valid date (YYYY-MM-DD).", field=name)]
        )
