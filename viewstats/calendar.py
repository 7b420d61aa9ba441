"""Resolution calendar: bucket-boundary arithmetic per resolution.

Hourly, daily and weekly buckets are fixed durations. Monthly and yearly
buckets follow the calendar of the viewing timezone, so a month is 28 to 31
days and a year 365 or 366 days, always starting at local midnight on the 1st.
"""

from __future__ import annotations
from typing import Dict, Optional

import pandas as pd

from . import canon, utils
from .types import BoundaryUnit, Resolution

_UNITS: Dict[str, BoundaryUnit] = {
    "hourly": BoundaryUnit("fixed_duration", pd.Timedelta(hours=1)),
    "daily": BoundaryUnit("fixed_duration", pd.Timedelta(days=1)),
    "weekly": BoundaryUnit("fixed_duration", pd.Timedelta(days=7)),
    "monthly": BoundaryUnit("calendar_unit", pd.DateOffset(months=1)),
    "yearly": BoundaryUnit("calendar_unit", pd.DateOffset(years=1)),
}


def boundary_unit(resolution: Resolution) -> BoundaryUnit:
    try:
        return _UNITS[resolution]
    except KeyError:
        raise ValueError(f"Unknown resolution: {resolution!r}") from None


def next_boundary(
    ts: pd.Timestamp, resolution: Resolution, tz: str = canon.DEFAULT_TZ
) -> pd.Timestamp:
    """
    First bucket boundary strictly after ts, in UTC.

    Fixed durations step from ts itself; calendar units jump to the next
    local month/year start.
    """
    unit = boundary_unit(resolution)
    ts = utils.to_utc(ts)
    if not unit.is_calendar:
        return ts + unit.value

    local = utils.to_local(ts, tz)
    if resolution == "monthly":
        wall = pd.Timestamp(year=local.year, month=local.month, day=1)
    else:
        wall = pd.Timestamp(year=local.year, month=1, day=1)
    return utils.localize_wall(wall + unit.value, tz)


def bucket_width(resolution: Resolution) -> Optional[str]:
    """Store sub-bucket width; None means one aggregate per period."""
    if boundary_unit(resolution).is_calendar:
        return None
    return canon.BUCKET_WIDTHS[resolution]
