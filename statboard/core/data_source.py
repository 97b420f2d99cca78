from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .exceptions import DataSourceError
from .query import Predicate

logger = logging.getLogger(__name__)

# pandas period alias + label format per bucket size
_INTERVAL_FORMATS: Dict[str, Tuple[str, str]] = {
    "hour": ("h", "%Y-%m-%d %H:00"),
    "day": ("D", "%Y-%m-%d"),
    "month": ("M", "%Y-%m"),
    "year": ("Y", "%Y"),
}


class DataSource(ABC):
    """
    Abstract interface for whatever answers aggregate queries (ORM, SQL, in-memory frames).

    Implementations should raise {@link DataSourceError} for transient failures
    so widgets can retry once and then report a stale/error state.
    """

    @abstractmethod
    def count(self, source: str, predicates: Sequence[Predicate]) -> int:
        pass

    @abstractmethod
    def aggregate(
        self, source: str, predicates: Sequence[Predicate], fn: str, field: Optional[str]
    ) -> float:
        pass

    @abstractmethod
    def series_aggregate(
        self,
        source: str,
        predicates: Sequence[Predicate],
        interval: str,
        fn: str,
        field: Optional[str],
        date_field: str = "created_at",
    ) -> List[Tuple[str, float]]:
        """Ordered (bucket label, value) pairs."""
        pass


class DataFrameSource(DataSource):
    """
    In-memory implementation backed by pandas DataFrames, one per source name.

    Date predicates compare against the calendar date of the timestamp column,
    so an inclusive end_date of 2024-01-31 keeps rows created late on the 31st.
    """

    def __init__(self, frames: Mapping[str, pd.DataFrame]):
        self._frames: Dict[str, pd.DataFrame] = dict(frames)

    @property
    def sources(self) -> List[str]:
        return sorted(self._frames)

    def frame(self, source: str) -> pd.DataFrame:
        try:
            return self._frames[source]
        except KeyError:
            raise DataSourceError(f"Unknown source '{source}'")

    # -------------------------------------------------------------------------
    # Filtering
    # -------------------------------------------------------------------------
    def filtered(self, source: str, predicates: Sequence[Predicate]) -> pd.DataFrame:
        df = self.frame(source)
        mask = np.ones(len(df), dtype=bool)
        for pred in predicates:
            mask &= self._mask_for(df, pred)
        return df.loc[mask]

    def _mask_for(self, df: pd.DataFrame, pred: Predicate) -> np.ndarray:
        if pred.field not in df.columns:
            raise DataSourceError(f"Unknown field '{pred.field}'")

        column = df[pred.field]
        value = pred.value
        if isinstance(value, (date, datetime)) and not isinstance(value, pd.Timestamp):
            # Compare on calendar day
            column = pd.to_datetime(column).dt.normalize()
            value = pd.Timestamp(value).normalize()

        if pred.op == "eq":
            result = column == value
        elif pred.op == "ne":
            result = column != value
        elif pred.op == "ge":
            result = column >= value
        elif pred.op == "le":
            result = column <= value
        elif pred.op == "gt":
            result = column > value
        elif pred.op == "lt":
            result = column < value
        elif pred.op == "in":
            result = column.isin(list(value))
        else:
            raise DataSourceError(f"Unsupported operator '{pred.op}'")

        return result.to_numpy(dtype=bool)

    # -------------------------------------------------------------------------
    # Aggregates
    # -------------------------------------------------------------------------
    def count(self, source: str, predicates: Sequence[Predicate]) -> int:
        return int(len(self.filtered(source, predicates)))

    def aggregate(
        self, source: str, predicates: Sequence[Predicate], fn: str, field: Optional[str]
    ) -> float:
        df = self.filtered(source, predicates)
        if fn == "count":
            return float(len(df))
        values = self._numeric(df, field)
        if values.empty:
            return 0.0
        if fn == "sum":
            return float(values.sum())
        if fn == "average":
            return float(values.mean())
        raise DataSourceError(f"Unsupported aggregate '{fn}'")

    def series_aggregate(
        self,
        source: str,
        predicates: Sequence[Predicate],
        interval: str,
        fn: str,
        field: Optional[str],
        date_field: str = "created_at",
    ) -> List[Tuple[str, float]]:
        try:
            freq, label_fmt = _INTERVAL_FORMATS[interval]
        except KeyError:
            raise DataSourceError(f"Unsupported interval '{interval}'")

        df = self.filtered(source, predicates)
        if df.empty:
            return []
        if date_field not in df.columns:
            raise DataSourceError(f"Unknown field '{date_field}'")

        buckets = pd.to_datetime(df[date_field]).dt.to_period(freq)

        if fn == "count":
            grouped = df.groupby(buckets).size()
        else:
            values = self._numeric(df, field)
            grouped = values.groupby(buckets)
            grouped = grouped.sum() if fn == "sum" else grouped.mean()

        grouped = grouped.sort_index()
        return [
            (period.to_timestamp().strftime(label_fmt), float(value))
            for period, value in grouped.items()
        ]

    @staticmethod
    def _numeric(df: pd.DataFrame, field: Optional[str]) -> pd.Series:
        if not field or field not in df.columns:
            raise DataSourceError(f"Unknown field '{field}'")
        return pd.to_numeric(df[field], errors="coerce").dropna()


def frame_from_records(records: List[Dict[str, Any]], parse_dates: Sequence[str] = ()) -> pd.DataFrame:
    df = pd.DataFrame.from_records(records)
    for col in parse_dates:
        if col in df.columns:
            df[col] = pd.to_datetime(df[col])
    return df
