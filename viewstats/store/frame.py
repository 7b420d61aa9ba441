from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from .. import canon, exceptions, utils
from ..types import BucketRow
from .base import parse_width

# store aggregate name -> pandas reducer
REDUCERS: Dict[str, str] = {
    "SUM": "sum",
    "AVG": "mean",
    "MEAN": "mean",
    "COUNT": "count",
    "MIN": "min",
    "MAX": "max",
}


def _as_value(v) -> Optional[float]:
    v = float(v)
    return None if np.isnan(v) else v


def _normalise(df: pd.DataFrame) -> pd.DataFrame:
    idx = pd.DatetimeIndex(df.index)
    idx = idx.tz_localize("UTC") if idx.tz is None else idx.tz_convert("UTC")
    out = df.copy()
    out.index = idx
    out.index.name = canon.INDEX_NAME
    return out.sort_index()


class FrameStore:
    """
    In-memory store backed by one pandas DataFrame of raw points per measurement.

    Expected frames:
      - DatetimeIndex named 'time' (tz-aware or naive UTC)
      - tag columns (e.g. 'episodeId', 'seriesId', 'organizationId')
      - numeric field columns (e.g. 'value')

    Follows the store's grouping semantics: when a period holds any point,
    every bucket of the period is returned and empty ones carry None.
    """

    def __init__(self, frames: Mapping[str, pd.DataFrame]):
        self._frames: Dict[str, pd.DataFrame] = {
            name: _normalise(df) for name, df in frames.items()
        }

    @classmethod
    def from_records(
        cls,
        measurement: str,
        records: Iterable[Mapping[str, object]],
        *,
        time_key: str = canon.INDEX_NAME,
    ) -> "FrameStore":
        df = pd.DataFrame.from_records(list(records))
        if df.empty:
            return cls({measurement: pd.DataFrame(index=pd.DatetimeIndex([]))})
        df[time_key] = pd.to_datetime(df[time_key], utc=True)
        return cls({measurement: df.set_index(time_key)})

    def frame(self, measurement: str) -> pd.DataFrame:
        return self._frames[measurement].copy()

    def _select(
        self,
        measurement: str,
        resource_id_column: str,
        resource_id: str,
        aggregation_variable: str,
    ) -> pd.Series:
        df = self._frames.get(measurement)
        if df is None or df.empty:
            return pd.Series(dtype=float, index=pd.DatetimeIndex([], tz="UTC"))
        for col in (resource_id_column, aggregation_variable):
            if col not in df.columns:
                raise exceptions.StoreQueryError(
                    f"Unknown column {col!r} in measurement {measurement!r}"
                )
        rows = df.loc[df[resource_id_column] == resource_id]
        try:
            return rows[aggregation_variable].astype(float)
        except (TypeError, ValueError) as e:
            raise exceptions.StoreQueryError(
                f"Non-numeric field {aggregation_variable!r} in measurement "
                f"{measurement!r}"
            ) from e

    @staticmethod
    def _reducer(aggregation: str) -> str:
        try:
            return REDUCERS[aggregation.upper()]
        except KeyError:
            raise exceptions.StoreQueryError(
                f"Unsupported aggregation {aggregation!r}"
            ) from None

    def query_bucketed(
        self,
        measurement: str,
        resource_id_column: str,
        resource_id: str,
        period_start: pd.Timestamp,
        period_end: pd.Timestamp,
        aggregation: str,
        aggregation_variable: str,
        bucket_width: Optional[str],
    ) -> List[BucketRow]:
        reducer = self._reducer(aggregation)
        start, end = utils.to_utc(period_start), utils.to_utc(period_end)
        s = self._select(
            measurement, resource_id_column, resource_id, aggregation_variable
        )
        s = s.loc[(s.index >= start) & (s.index < end)]
        if s.empty:
            return []

        if bucket_width is None:
            return [(utils.format_label(start), _as_value(s.agg(reducer)))]

        width = parse_width(bucket_width)
        keys = start + ((s.index - start) // width) * width
        grouped = s.groupby(keys).agg(reducer)
        buckets = pd.date_range(start=start, end=end, freq=width, inclusive="left")
        grouped = grouped.reindex(buckets)
        return [(utils.format_label(t), _as_value(v)) for t, v in grouped.items()]

    def query_single_aggregate(
        self,
        measurement: str,
        resource_id_column: str,
        resource_id: str,
        aggregation: str,
        aggregation_variable: str,
        upper_bound_exclusive: pd.Timestamp,
    ) -> Optional[float]:
        reducer = self._reducer(aggregation)
        bound = utils.to_utc(upper_bound_exclusive)
        s = self._select(
            measurement, resource_id_column, resource_id, aggregation_variable
        )
        s = s.loc[s.index < bound]
        if s.empty:
            return None
        return _as_value(s.agg(reducer))
