from __future__ import annotations
from typing import TypedDict, Literal, List, Optional, Tuple, Union
from dataclasses import dataclass, field

import pandas as pd

from . import canon

Resolution = Literal["hourly", "daily", "weekly", "monthly", "yearly"]
RESOLUTIONS: Tuple[Resolution, ...] = ("hourly", "daily", "weekly", "monthly", "yearly")

ResourceType = Literal["episode", "series", "organization"]

BoundaryKind = Literal["fixed_duration", "calendar_unit"]

# (bucket label, aggregate value or None when the store reported null)
BucketRow = Tuple[str, Optional[float]]


@dataclass(frozen=True)
class BoundaryUnit:
    """Step between two bucket boundaries.

    - fixed_duration: value is a pd.Timedelta, independent of timezone
    - calendar_unit: value is a pd.DateOffset applied to local wall time
    """

    kind: BoundaryKind
    value: Union[pd.Timedelta, pd.DateOffset]

    @property
    def is_calendar(self) -> bool:
        return self.kind == "calendar_unit"


@dataclass(frozen=True)
class Period:
    """Half-open [start, end) range in UTC."""

    start: pd.Timestamp
    end: pd.Timestamp

    @property
    def duration(self) -> pd.Timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class ProviderConfig:
    provider_id: str
    resource_type: str
    aggregation: str  # "SUM" | "AVG" | any store aggregate
    aggregation_variable: str
    measurement: str
    resource_id_column: str
    statistic: str = canon.DEFAULT_STATISTIC
    title: str = ""
    description: str = ""
    resolutions: Tuple[Resolution, ...] = RESOLUTIONS

    def __post_init__(self):
        object.__setattr__(self, "aggregation", self.aggregation.upper())
        object.__setattr__(self, "resolutions", tuple(self.resolutions))

    @property
    def is_cumulative(self) -> bool:
        return self.aggregation == canon.CUMULATIVE_AGGREGATION


@dataclass(frozen=True)
class TimeSeriesQuery:
    resource_id: str
    start: pd.Timestamp
    end: pd.Timestamp
    resolution: Resolution
    timezone: str = canon.DEFAULT_TZ


@dataclass
class TimeSeriesResult:
    labels: List[str] = field(default_factory=list)
    values: List[float] = field(default_factory=list)
    total: Optional[float] = None

    def __len__(self) -> int:
        return len(self.labels)


class _TimeSeriesPayloadBase(TypedDict):
    labels: List[str]
    values: List[float]


class TimeSeriesPayload(_TimeSeriesPayloadBase, total=False):
    total: float
