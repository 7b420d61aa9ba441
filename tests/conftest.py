import threading

import pytest

from viewstats import exceptions, utils
from viewstats.registry import views_provider
from viewstats.store import FrameStore
from viewstats.types import ProviderConfig


class ScriptedClient:
    """Store double answering from canned rows keyed by period start label."""

    def __init__(self, rows=None, baseline=None, fail_on=None, fail_with=None):
        self.rows = rows or {}
        self.baseline = baseline
        self.fail_on = fail_on
        self.fail_with = fail_with or exceptions.StoreUnavailableError
        self.bucketed_calls = []
        self.single_calls = []
        self._lock = threading.Lock()

    def query_bucketed(
        self,
        measurement,
        resource_id_column,
        resource_id,
        period_start,
        period_end,
        aggregation,
        aggregation_variable,
        bucket_width,
    ):
        label = utils.format_label(period_start)
        with self._lock:
            self.bucketed_calls.append(
                (label, utils.format_label(period_end), bucket_width)
            )
        if label == self.fail_on:
            raise self.fail_with(f"scripted failure at {label}")
        return list(self.rows.get(label, []))

    def query_single_aggregate(
        self,
        measurement,
        resource_id_column,
        resource_id,
        aggregation,
        aggregation_variable,
        upper_bound_exclusive,
    ):
        with self._lock:
            self.single_calls.append(utils.format_label(upper_bound_exclusive))
        return self.baseline


@pytest.fixture
def scripted():
    return ScriptedClient


@pytest.fixture
def episode_views():
    return views_provider("episode")


@pytest.fixture
def episode_avg():
    return ProviderConfig(
        provider_id="episode.duration.avg",
        resource_type="episode",
        aggregation="avg",
        aggregation_variable="duration",
        measurement="playbacks",
        resource_id_column="episodeId",
        statistic="duration",
    )


@pytest.fixture
def view_records():
    # Raw view counts for one episode; ep-2 points must never leak into ep-1.
    rows = [
        ("2023-12-31T08:00:00Z", "ep-1", 4.0),
        ("2023-12-31T20:00:00Z", "ep-1", 6.0),
        ("2024-01-01T00:10:00Z", "ep-1", 2.0),
        ("2024-01-01T00:50:00Z", "ep-1", 3.0),
        ("2024-01-01T02:20:00Z", "ep-1", 3.0),
        ("2024-01-01T01:30:00Z", "ep-2", 100.0),
        ("2024-01-20T12:00:00Z", "ep-1", 7.0),
        ("2024-02-14T09:00:00Z", "ep-1", 5.0),
        ("2024-03-10T18:00:00Z", "ep-1", 1.0),
        ("2024-03-20T18:00:00Z", "ep-1", 50.0),
    ]
    return [
        {
            "time": t,
            "episodeId": ep,
            "seriesId": "series-1",
            "organizationId": "org-1",
            "value": v,
        }
        for t, ep, v in rows
    ]


@pytest.fixture
def views_store(view_records):
    return FrameStore.from_records("impressions", view_records)
