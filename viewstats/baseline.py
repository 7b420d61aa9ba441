from __future__ import annotations

import pandas as pd

from .store.base import StoreQueryClient
from .types import ProviderConfig


def resolve_baseline(
    client: StoreQueryClient,
    config: ProviderConfig,
    resource_id: str,
    start: pd.Timestamp,
) -> float:
    """
    Cumulative value accrued before `start`.

    Seeds the running total so a cumulative chart of a recent window starts
    from the true value at `start` instead of zero. No rows -> 0.0.
    """
    value = client.query_single_aggregate(
        config.measurement,
        config.resource_id_column,
        resource_id,
        config.aggregation,
        config.aggregation_variable,
        start,
    )
    return 0.0 if value is None else float(value)
