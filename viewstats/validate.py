from __future__ import annotations
from typing import Sequence, cast
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd

from . import exceptions, utils
from .types import RESOLUTIONS, Resolution


def parse_resolution(value: str) -> Resolution:
    """Case-insensitive resolution name, e.g. 'DAILY' -> 'daily'."""
    name = (value or "").strip().lower()
    if name not in RESOLUTIONS:
        raise ValueError(
            f"'resolution' must be one of {', '.join(repr(r) for r in RESOLUTIONS)}, "
            f"got {value!r}"
        )
    return cast(Resolution, name)


def parse_instant(value: str) -> pd.Timestamp:
    """Parse an ISO-8601 instant into a UTC Timestamp (naive input is UTC)."""
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Not an ISO-8601 instant: {value!r}") from e
    if ts is pd.NaT:
        raise ValueError(f"Not an ISO-8601 instant: {value!r}")
    return utils.to_utc(ts)


def check_range(start: pd.Timestamp, end: pd.Timestamp) -> None:
    exceptions.require(
        utils.to_utc(start) < utils.to_utc(end),
        f"'from' must be before 'to' (from={start}, to={end})",
        exceptions.InvalidRangeError,
    )


def check_timezone(name: str) -> str:
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name!r}") from e
    return name


def check_supported(
    resolution: Resolution, supported: Sequence[Resolution], provider_id: str
) -> Resolution:
    if resolution not in supported:
        raise ValueError(
            f"Provider {provider_id!r} does not offer {resolution!r} resolution; "
            f"supported: {', '.join(repr(r) for r in supported)}"
        )
    return resolution
