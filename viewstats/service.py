from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import NamedTuple, Optional, Union

import httpx
import pandas as pd

from . import canon, config, utils, validate
from .assemble import assemble
from .registry import ProviderRegistry
from .store.base import StoreQueryClient
from .store.influx import InfluxConnection, InfluxStore
from .types import ProviderConfig, TimeSeriesQuery, TimeSeriesResult

logger = logging.getLogger(__name__)

Instant = Union[pd.Timestamp, datetime, str]


class _State(NamedTuple):
    settings: config.StatisticsSettings
    registry: ProviderRegistry
    client: StoreQueryClient


class StatisticsService:
    """
    Entry point for the transport layer.

    Holds one immutable (settings, registry, client) snapshot. Every request
    reads the snapshot once, so a concurrent reconfigure() is seen either
    entirely or not at all by that request.

    Without an explicit client the service owns an InfluxConnection built
    from `settings.store`.
    """

    def __init__(
        self,
        settings: Optional[config.StatisticsSettings] = None,
        client: Optional[StoreQueryClient] = None,
        *,
        max_workers: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        settings = settings or config.default_config()
        self._connection: Optional[InfluxConnection] = None
        if client is None:
            self._connection = InfluxConnection(settings.store, transport=transport)
            client = InfluxStore(self._connection)
        self._max_workers = max_workers
        self._lock = threading.Lock()
        self._state = _State(settings, config.build_registry(settings), client)

    @property
    def settings(self) -> config.StatisticsSettings:
        return self._state.settings

    @property
    def registry(self) -> ProviderRegistry:
        return self._state.registry

    def time_series(
        self,
        resource_type: str,
        resource_id: str,
        start: Instant,
        end: Instant,
        resolution: str,
        *,
        statistic: str = canon.DEFAULT_STATISTIC,
        timezone: Optional[str] = None,
    ) -> TimeSeriesResult:
        state = self._state
        provider = state.registry.resolve(resource_type, statistic)
        return self._run(state, provider, resource_id, start, end, resolution, timezone)

    def provider_time_series(
        self,
        provider_id: str,
        resource_id: str,
        start: Instant,
        end: Instant,
        resolution: str,
        *,
        timezone: Optional[str] = None,
    ) -> TimeSeriesResult:
        state = self._state
        provider = state.registry.get(provider_id)
        return self._run(state, provider, resource_id, start, end, resolution, timezone)

    def episode_views(self, episode_id: str, start, end, resolution: str, **kw):
        return self.time_series("episode", episode_id, start, end, resolution, **kw)

    def series_views(self, series_id: str, start, end, resolution: str, **kw):
        return self.time_series("series", series_id, start, end, resolution, **kw)

    def organization_views(
        self, organization_id: str, start, end, resolution: str, **kw
    ):
        return self.time_series(
            "organization", organization_id, start, end, resolution, **kw
        )

    def _run(
        self,
        state: _State,
        provider: ProviderConfig,
        resource_id: str,
        start: Instant,
        end: Instant,
        resolution: str,
        timezone: Optional[str],
    ) -> TimeSeriesResult:
        query = TimeSeriesQuery(
            resource_id=resource_id,
            start=utils.to_utc(start),
            end=utils.to_utc(end),
            resolution=validate.check_supported(
                validate.parse_resolution(resolution),
                provider.resolutions,
                provider.provider_id,
            ),
            timezone=validate.check_timezone(timezone or state.settings.timezone),
        )
        return assemble(state.client, provider, query, max_workers=self._max_workers)

    def reconfigure(self, settings: config.StatisticsSettings) -> None:
        """Swap in a new configuration snapshot."""
        registry = config.build_registry(settings)
        with self._lock:
            if self._connection is not None:
                self._connection.reconfigure(settings.store)
            self._state = _State(settings, registry, self._state.client)
        logger.info(
            "Statistics service reconfigured: %d provider(s), timezone %s",
            len(registry),
            settings.timezone,
        )

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()

    def __enter__(self) -> "StatisticsService":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
