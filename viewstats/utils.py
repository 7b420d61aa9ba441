# viewstats/utils.py
from __future__ import annotations
from datetime import datetime
from zoneinfo import ZoneInfo

import pandas as pd

from . import canon


def to_utc(ts: pd.Timestamp | datetime | str) -> pd.Timestamp:
    """Return a tz-aware UTC Timestamp; naive input is taken as UTC."""
    t = pd.Timestamp(ts)
    if t.tz is None:
        return t.tz_localize("UTC")
    return t.tz_convert("UTC")


def to_local(ts: pd.Timestamp, tz: str) -> pd.Timestamp:
    return to_utc(ts).tz_convert(ZoneInfo(tz))


def localize_wall(naive: pd.Timestamp, tz: str) -> pd.Timestamp:
    """
    Attach tz to a naive local wall time and return it in UTC.

    Wall times inside a DST gap move forward to the first valid instant;
    ambiguous wall times (DST overlap) take the earlier instant.
    """
    local = pd.Timestamp(naive).tz_localize(
        ZoneInfo(tz), ambiguous=True, nonexistent="shift_forward"
    )
    return local.tz_convert("UTC")


def format_label(ts: pd.Timestamp | datetime | str) -> str:
    """ISO-8601 UTC instant with a 'Z' suffix, e.g. 2024-01-01T00:00:00Z.

    Sub-second parts are kept (2024-01-01T00:00:00.750000Z).
    """
    return to_utc(ts).isoformat().replace("+00:00", "Z")


def labels_to_index(labels: list[str]) -> pd.DatetimeIndex:
    idx = pd.DatetimeIndex(pd.to_datetime(labels, utc=True))
    idx.name = canon.INDEX_NAME
    return idx
