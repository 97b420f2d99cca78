"""
Core domain layer: filter snapshots and store, aggregate query building,
data source contract, widget base class and the widget registry
"""

from .filter_state import FilterState
from .filter_store import FilterStore, Subscription
from .query import AggregateQuery, AggregateQueryBuilder, Predicate, TimeSeriesQuery
from .data_source import DataFrameSource, DataSource
from .base_widget import WidgetBinding
from .widget_registry import WidgetRegistry

__all__ = [
    "FilterState",
    "FilterStore",
    "Subscription",
    "AggregateQuery",
    "AggregateQueryBuilder",
    "Predicate",
    "TimeSeriesQuery",
    "DataFrameSource",
    "DataSource",
    "WidgetBinding",
    "WidgetRegistry",
]
