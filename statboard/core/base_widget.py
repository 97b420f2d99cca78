from __future__ import annotations

import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Executor, Future
from typing import Any, List, Optional, Tuple

import plotly.graph_objs as go
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from .data_source import DataSource
from .exceptions import DataSourceError, InvalidIntervalError, ValidationError
from .filter_state import FilterState
from .filter_store import FilterStore, Subscription
from .query import AggregateQuery, AggregateQueryBuilder, TimeSeriesQuery

logger = logging.getLogger(__name__)


def dev_mode_enabled() -> bool:
    return os.getenv("STATBOARD_DEV", "0") == "1"


class WidgetBinding(ABC):
    """
    Abstract base class for all dashboard widgets.

    Defines the contract that every widget in the app must follow
    - expose an 'id' - used internally
    - expose a 'label' - used for UI/human-readable applications
    - implement 'compute_data' - derive and run the widget's aggregate queries for a FilterState
    - implement 'render_figure' - turn the computed result into a Plotly figure

    The binding keeps a reference to the page's {@link FilterStore} (it does not
    own it). Results are cached in 'last_result' and replaced wholesale on each
    filter change. Recomputation can run on an executor, in which case a result
    is only applied if no newer filter version was requested in the meantime.
    """

    id: str = None
    label: str = None
    source: str = "posts"

    def __init__(
        self,
        store: FilterStore,
        data_source: DataSource,
        *,
        builder: Optional[AggregateQueryBuilder] = None,
        executor: Optional[Executor] = None,
        strict: Optional[bool] = None,
    ):
        self.store = store
        self.data_source = data_source
        self.builder = builder or AggregateQueryBuilder()
        self.executor = executor
        self.strict = dev_mode_enabled() if strict is None else strict

        self.last_result: Any = None
        self.last_error: Optional[str] = None
        self.reads = 0

        self._lock = threading.Lock()
        self._computed = False
        self._requested_version = 0
        self._applied_version = 0
        self._requested_state: Optional[FilterState] = None
        self._subscription: Optional[Subscription] = None

    # ------------------------------------------------------------------
    # Widget-specific behaviour
    # ------------------------------------------------------------------
    @abstractmethod
    def compute_data(self, state: FilterState) -> Any:
        """
        Build this widget's queries for the given FilterState and run them.
        :param state: the filter snapshot to compute against
        :return: render-ready result (dict of scalars, list of buckets, ...)
        """
        raise NotImplementedError()

    @abstractmethod
    def render_figure(self, data: Any, state: FilterState) -> go.Figure:
        """
        Render the figure given the computed data
        :param data: the data provided by {@link compute_data()}
        :param state: the FilterState the data was computed for
        :return: the Plotly figure
        """
        raise NotImplementedError()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def attach(self) -> None:
        if self._subscription is None:
            self._subscription = self.store.subscribe(self.on_filter_changed)

    def teardown(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    @property
    def attached(self) -> bool:
        return self._subscription is not None

    # ------------------------------------------------------------------
    # Filter propagation
    # ------------------------------------------------------------------
    def on_filter_changed(self, state: FilterState, version: Optional[int] = None) -> None:
        """
        Recompute for a new filter snapshot.

        Reapplying a state equal to the one already applied (or in flight) is a
        no-op, so the data source is read once per distinct FilterState.
        'version' is the store's version and only used for logging; freshness
        is tracked with the binding's own request sequence.
        """
        with self._lock:
            if self._computed and state == self._requested_state and self.last_error is None:
                logger.debug(
                    "Filter state unchanged, reusing cached result",
                    extra={"widget_id": self.id, "version": version},
                )
                return
            self._requested_version += 1
            ticket = self._requested_version
            self._requested_state = state
            self._computed = True

        logger.debug(
            "Recomputing widget",
            extra={"widget_id": self.id, "version": version, "ticket": ticket},
        )
        if self.executor is not None:
            future = self.executor.submit(self._recompute, state, ticket)
            future.add_done_callback(self._on_recompute_done)
        else:
            self._recompute(state, ticket)

    def _on_recompute_done(self, future: Future) -> None:
        # Strict-mode errors raised on a worker thread end up here
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(
                "Widget recompute failed on executor",
                exc_info=error,
                extra={"widget_id": self.id, "error": str(error)},
            )

    def current_result(self) -> Any:
        """Cached result; computes once from the store's snapshot if nothing ran yet."""
        if not self._computed:
            state, version = self.store.snapshot()
            self.on_filter_changed(state, version)
        return self.last_result

    @property
    def current_state(self) -> Optional[FilterState]:
        return self._requested_state

    @property
    def is_stale(self) -> bool:
        return self.last_error is not None or self._applied_version < self._requested_version

    def _recompute(self, state: FilterState, version: int) -> None:
        try:
            result = self.timed_compute(state)
        except InvalidIntervalError:
            # Recorded before re-raising so reapplying the same state recomputes
            self._apply_error(version, "This widget is misconfigured.")
            if self.strict:
                raise
            logger.exception("Widget requested an unsupported interval", extra={"widget_id": self.id})
            return
        except ValidationError as e:
            logger.warning(
                "Filters rejected while computing widget",
                extra={"widget_id": self.id, "error": str(e)},
            )
            self._apply_error(version, str(e))
            return
        except DataSourceError as e:
            logger.error(
                "Data source failed after retry",
                extra={"widget_id": self.id, "version": version, "error": str(e)},
            )
            self._apply_error(version, f"Data unavailable: {e}")
            return
        except Exception as e:
            self._apply_error(version, f"Unexpected error: {e}")
            if self.strict:
                raise
            logger.exception("Unexpected error computing widget", extra={"widget_id": self.id})
            return

        self._apply_result(version, result)

    def _apply_result(self, version: int, result: Any) -> bool:
        with self._lock:
            if version < self._requested_version or version < self._applied_version:
                logger.debug(
                    "Dropping stale widget result",
                    extra={
                        "widget_id": self.id,
                        "version": version,
                        "latest": self._requested_version,
                    },
                )
                return False
            self.last_result = result
            self.last_error = None
            self._applied_version = version
            return True

    def _apply_error(self, version: int, message: str) -> None:
        with self._lock:
            if version < self._requested_version:
                return
            # Keep the previous result around, flagged as stale
            self.last_error = message
            self._applied_version = version

    # ------------------------------------------------------------------
    # Common helpers for all widgets
    # ------------------------------------------------------------------
    def timed_compute(self, state: FilterState) -> Any:
        t0 = time.perf_counter()
        data = self.compute_data(state)
        logger.info(
            "widget_compute",
            extra={
                "widget_id": self.id,
                "duration_ms": round((time.perf_counter() - t0) * 1000, 2),
            },
        )
        return data

    def base_query(self, state: FilterState, **kwargs: Any) -> AggregateQuery:
        return self.builder.base(self.source, state, **kwargs)

    def run(self, query: AggregateQuery) -> float:
        """Execute a scalar aggregate. count() results come back as int."""
        if query.aggregate_fn == "count":
            return self._read(self.data_source.count, query.source, query.predicates)
        return self._read(
            self.data_source.aggregate,
            query.source,
            query.predicates,
            query.aggregate_fn,
            query.field,
        )

    def run_series(self, query: TimeSeriesQuery) -> List[Tuple[str, float]]:
        return self._read(
            self.data_source.series_aggregate,
            query.source,
            query.predicates,
            query.interval,
            query.aggregate_fn,
            query.field,
            query.date_field,
        )

    # Interactive reads: one retry, no backoff
    @retry(
        stop=stop_after_attempt(2),
        retry=retry_if_exception_type(DataSourceError),
        reraise=True,
    )
    def _read(self, fn, *args):
        self.reads += 1
        return fn(*args)

    @staticmethod
    def empty_figure(message: str) -> go.Figure:
        """
        Standardised 'no data' figure used by all widgets.
        """
        fig = go.Figure()
        fig.update_layout(
            title=message,
            xaxis={"visible": False},
            yaxis={"visible": False},
        )
        return fig

    def figure(self) -> go.Figure:
        """Figure for the current result, or a message figure when there is nothing to show."""
        data = self.current_result()
        state = self._requested_state or self.store.current()
        if data is None:
            return self.empty_figure(self.last_error or "No data to show")
        fig = self.render_figure(data, state)
        if self.last_error:
            fig.add_annotation(
                text=f"Showing previous results: {self.last_error}",
                showarrow=False,
                xref="paper",
                yref="paper",
                x=0.5,
                y=1.08,
            )
        return fig
