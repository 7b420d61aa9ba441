from __future__ import annotations
from typing import List

import pandas as pd

from . import calendar, canon, utils, validate
from .types import Period, Resolution


def plan_periods(
    start: pd.Timestamp,
    end: pd.Timestamp,
    resolution: Resolution,
    tz: str = canon.DEFAULT_TZ,
) -> List[Period]:
    """
    Split [start, end) into contiguous resolution-sized periods.

    The first period starts at `start` and the last one is clipped to `end`.
    For monthly/yearly resolution every inner boundary is a local calendar
    boundary in `tz` (midnight on the 1st). Raises InvalidRangeError when
    start >= end.
    """
    start, end = utils.to_utc(start), utils.to_utc(end)
    validate.check_range(start, end)

    periods: List[Period] = []
    cursor = start
    while cursor < end:
        nxt = min(calendar.next_boundary(cursor, resolution, tz), end)
        periods.append(Period(cursor, nxt))
        cursor = nxt
    return periods
