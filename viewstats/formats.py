from __future__ import annotations

import json
from typing import List

import pandas as pd

from . import utils
from .types import TimeSeriesPayload, TimeSeriesResult


def to_payload(result: TimeSeriesResult) -> TimeSeriesPayload:
    """Response body shape; 'total' is left out when the statistic has none."""
    payload: TimeSeriesPayload = {
        "labels": list(result.labels),
        "values": [float(v) for v in result.values],
    }
    if result.total is not None:
        payload["total"] = float(result.total)
    return payload


def to_json(result: TimeSeriesResult) -> str:
    return json.dumps(to_payload(result))


def to_series(result: TimeSeriesResult) -> pd.Series:
    """Values indexed by bucket start (UTC DatetimeIndex)."""
    return pd.Series(
        result.values,
        index=utils.labels_to_index(result.labels),
        name="value",
        dtype=float,
    )


def deltas(result: TimeSeriesResult, baseline: float = 0.0) -> List[float]:
    """
    Per-bucket increments of a cumulative series.

    The first increment is taken relative to `baseline`, the value accrued
    before the series starts.
    """
    s = pd.Series([baseline, *result.values], dtype=float)
    return s.diff().iloc[1:].tolist()
