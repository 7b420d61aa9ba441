from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from . import calendar, exceptions, planner, utils, validate
from .baseline import resolve_baseline
from .store.base import StoreQueryClient
from .types import BucketRow, Period, ProviderConfig, TimeSeriesQuery, TimeSeriesResult

logger = logging.getLogger(__name__)


def _fetch_periods(
    client: StoreQueryClient,
    config: ProviderConfig,
    resource_id: str,
    periods: List[Period],
    bucket_width: Optional[str],
    max_workers: Optional[int],
) -> List[List[BucketRow]]:
    def fetch(period: Period) -> List[BucketRow]:
        return client.query_bucketed(
            config.measurement,
            config.resource_id_column,
            resource_id,
            period.start,
            period.end,
            config.aggregation,
            config.aggregation_variable,
            bucket_width,
        )

    if not max_workers or max_workers <= 1 or len(periods) <= 1:
        return [fetch(p) for p in periods]
    # map() yields in submission order and re-raises the first failure
    with ThreadPoolExecutor(max_workers=min(max_workers, len(periods))) as pool:
        return list(pool.map(fetch, periods))


def assemble(
    client: StoreQueryClient,
    config: ProviderConfig,
    query: TimeSeriesQuery,
    *,
    max_workers: Optional[int] = None,
) -> TimeSeriesResult:
    """
    Build the label/value series for one resource over [start, end).

    Cumulative (SUM) statistics start from the baseline accrued before
    `start` and emit the running total per bucket; other aggregations emit
    each bucket value as-is. A null bucket value counts as 0. A period for
    which the store has no rows at all yields one bucket at the period start
    holding the running value, so the series has no time gaps.

    `total` is the sum of raw bucket deltas for SUM statistics, else None.
    Any store failure aborts the whole call; no partial series is returned.
    """
    start, end = utils.to_utc(query.start), utils.to_utc(query.end)
    validate.check_range(start, end)

    periods = planner.plan_periods(start, end, query.resolution, query.timezone)
    width = calendar.bucket_width(query.resolution)
    logger.debug(
        "Assembling %s for %s=%r over [%s, %s) at %s (%s): %d period(s)",
        config.provider_id,
        config.resource_id_column,
        query.resource_id,
        start,
        end,
        query.resolution,
        query.timezone,
        len(periods),
    )

    try:
        baseline = (
            resolve_baseline(client, config, query.resource_id, start)
            if config.is_cumulative
            else 0.0
        )
        fetched = _fetch_periods(
            client, config, query.resource_id, periods, width, max_workers
        )
    except exceptions.StoreError as e:
        logger.error(
            "Store query failed for %s(%s) FROM %s WHERE %s=%r "
            "range=[%s, %s) resolution=%s tz=%s: %s",
            config.aggregation,
            config.aggregation_variable,
            config.measurement,
            config.resource_id_column,
            query.resource_id,
            start,
            end,
            query.resolution,
            query.timezone,
            e,
        )
        raise

    running = baseline
    labels: List[str] = []
    values: List[float] = []
    deltas: List[float] = []
    for period, rows in zip(periods, fetched):
        if not rows:
            # gap-fill
            labels.append(utils.format_label(period.start))
            values.append(running)
            continue
        for label, value in rows:
            delta = 0.0 if value is None else float(value)
            labels.append(label)
            if config.is_cumulative:
                running += delta
                deltas.append(delta)
                values.append(running)
            else:
                values.append(delta)

    total = float(sum(deltas)) if config.is_cumulative else None
    return TimeSeriesResult(labels=labels, values=values, total=total)
