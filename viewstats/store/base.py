from __future__ import annotations
import re
from typing import Dict, List, Optional, Protocol

import pandas as pd

from .. import exceptions
from ..types import BucketRow

_DURATION_UNITS: Dict[str, str] = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
    "w": "weeks",
}
_DURATION_RE = re.compile(r"^(\d+)([smhdw])$")


def parse_width(width: str) -> pd.Timedelta:
    """Store duration literal ('1h', '7d', '1w') to a Timedelta."""
    m = _DURATION_RE.match(width.strip())
    if m is None:
        raise exceptions.StoreQueryError(f"Unsupported bucket width: {width!r}")
    return pd.Timedelta(**{_DURATION_UNITS[m.group(2)]: int(m.group(1))})


class StoreQueryClient(Protocol):
    """Read access to an aggregate time-series store.

    Implementations raise StoreUnavailableError when the store cannot be
    reached and StoreQueryError when it answers with an unexpected shape.
    Neither call keeps state that a failure could leave half-updated.
    """

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
        """
        Aggregate per bucket over [period_start, period_end).

        Buckets are anchored at period_start. With bucket_width None the whole
        period is one bucket labeled at period_start. Returns [] when the store
        holds no rows for the period.
        """
        ...

    def query_single_aggregate(
        self,
        measurement: str,
        resource_id_column: str,
        resource_id: str,
        aggregation: str,
        aggregation_variable: str,
        upper_bound_exclusive: pd.Timestamp,
    ) -> Optional[float]:
        """Aggregate over all rows strictly before upper_bound_exclusive."""
        ...
