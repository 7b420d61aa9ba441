"""InfluxDB 1.x adapter for the store query contract.

Statements are InfluxQL with bound parameters, sent to the HTTP `/query`
endpoint. Time filters are half-open: `time >= $from AND time < $to`.
"""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

import httpx
import pandas as pd

from .. import exceptions, utils
from ..config import StoreSettings
from ..types import BucketRow
from .base import parse_width

logger = logging.getLogger(__name__)

_EPOCH = pd.Timestamp(0, tz="UTC")

# aggregate names the store spells differently
_FUNCTIONS: Dict[str, str] = {"AVG": "MEAN"}

# credentials rejected: the store is there but not usable with this handle
_AUTH_FAILURES = (401, 403)


def quote_ident(name: str) -> str:
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _select(aggregation: str, variable: str, measurement: str, column: str) -> str:
    fn = _FUNCTIONS.get(aggregation.upper(), aggregation.upper())
    return (
        f"SELECT {fn}({quote_ident(variable)}) FROM {quote_ident(measurement)} "
        f"WHERE {quote_ident(column)} = $resourceId"
    )


def group_offset(start: pd.Timestamp, width: pd.Timedelta) -> pd.Timedelta:
    """Offset that moves epoch-aligned store buckets onto `start`."""
    return (utils.to_utc(start) - _EPOCH) % width


def bucketed_statement(
    measurement: str,
    resource_id_column: str,
    aggregation: str,
    aggregation_variable: str,
    period_start: pd.Timestamp,
    bucket_width: Optional[str],
) -> str:
    q = (
        _select(aggregation, aggregation_variable, measurement, resource_id_column)
        + " AND time >= $from AND time < $to"
    )
    if bucket_width is not None:
        offset = group_offset(period_start, parse_width(bucket_width))
        q += f" GROUP BY time({bucket_width}, {offset.value}ns)"
    return q


def single_statement(
    measurement: str,
    resource_id_column: str,
    aggregation: str,
    aggregation_variable: str,
) -> str:
    return (
        _select(aggregation, aggregation_variable, measurement, resource_id_column)
        + " AND time < $to"
    )


class _Handle:
    def __init__(
        self, settings: StoreSettings, transport: Optional[httpx.BaseTransport]
    ):
        self.settings = settings
        self.client = httpx.Client(
            base_url=settings.uri,
            auth=(settings.username, settings.password) if settings.username else None,
            timeout=settings.timeout_s,
            transport=transport,
        )
        self.leases = 0
        self.retired = False


class InfluxConnection:
    """
    Process-wide, reconfigurable store handle.

    Queries run inside lease(). reconfigure() and close() retire the current
    HTTP client; a retired client is closed once its last lease ends, so an
    in-flight query never sees its client closed underneath it.
    """

    def __init__(
        self,
        settings: StoreSettings,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._lock = threading.Lock()
        self._transport = transport
        self._handle: Optional[_Handle] = _Handle(settings, transport)

    @property
    def settings(self) -> Optional[StoreSettings]:
        handle = self._handle
        return handle.settings if handle is not None else None

    @property
    def closed(self) -> bool:
        return self._handle is None

    @contextmanager
    def lease(self) -> Iterator[_Handle]:
        with self._lock:
            handle = self._handle
            if handle is None:
                raise exceptions.StoreUnavailableError("Store connection is closed")
            handle.leases += 1
        try:
            yield handle
        finally:
            with self._lock:
                handle.leases -= 1
                release = handle.retired and handle.leases == 0
            if release:
                handle.client.close()

    def _swap(self, new: Optional[_Handle]) -> None:
        with self._lock:
            old, self._handle = self._handle, new
            release = False
            if old is not None:
                old.retired = True
                release = old.leases == 0
        if release:
            old.client.close()
        elif old is not None:
            logger.info("Store client retired with %d query(ies) in flight", old.leases)

    def reconfigure(self, settings: StoreSettings) -> None:
        logger.info(
            "Reconnecting to store at %s (db=%s)", settings.uri, settings.database
        )
        self._swap(_Handle(settings, self._transport))

    def close(self) -> None:
        self._swap(None)


class InfluxStore:
    """StoreQueryClient over an InfluxConnection."""

    def __init__(self, connection: InfluxConnection):
        self.connection = connection

    def _query(self, statement: str, params: Dict[str, str]) -> List[List[Any]]:
        with self.connection.lease() as handle:
            logger.debug("influx query: %s params=%s", statement, params)
            try:
                resp = handle.client.get(
                    "/query",
                    params={
                        "db": handle.settings.database,
                        "q": statement,
                        "params": json.dumps(params),
                    },
                )
            except httpx.TransportError as e:
                raise exceptions.StoreUnavailableError(
                    f"Store unreachable at {handle.settings.uri}: {e}"
                ) from e

        context = f"{statement} params={params}"
        if resp.status_code >= 500 or resp.status_code in _AUTH_FAILURES:
            logger.warning("Store answered HTTP %d for %s", resp.status_code, context)
            raise exceptions.StoreUnavailableError(
                f"Store answered HTTP {resp.status_code} for {context}"
            )
        try:
            payload = resp.json()
        except ValueError as e:
            raise exceptions.StoreQueryError(
                f"Non-JSON store response for {context}"
            ) from e
        if resp.status_code >= 400:
            logger.warning(
                "Store rejected query (HTTP %d): %s", resp.status_code, context
            )
            raise exceptions.StoreQueryError(
                f"Store rejected query: {_error_of(payload)} ({context})"
            )
        return _rows(payload, context)

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
        statement = bucketed_statement(
            measurement,
            resource_id_column,
            aggregation,
            aggregation_variable,
            period_start,
            bucket_width,
        )
        params = {
            "resourceId": resource_id,
            "from": utils.format_label(period_start),
            "to": utils.format_label(period_end),
        }
        rows = self._query(statement, params)
        context = f"{statement} params={params}"
        if bucket_width is None:
            if len(rows) > 1:
                raise exceptions.StoreQueryError(
                    f"Expected at most one row, got {len(rows)} for {context}"
                )
            label = utils.format_label(period_start)
            return [(label, _value(r, context)) for r in rows]
        return [(_label(r, context), _value(r, context)) for r in rows]

    def query_single_aggregate(
        self,
        measurement: str,
        resource_id_column: str,
        resource_id: str,
        aggregation: str,
        aggregation_variable: str,
        upper_bound_exclusive: pd.Timestamp,
    ) -> Optional[float]:
        statement = single_statement(
            measurement, resource_id_column, aggregation, aggregation_variable
        )
        params = {
            "resourceId": resource_id,
            "to": utils.format_label(upper_bound_exclusive),
        }
        rows = self._query(statement, params)
        context = f"{statement} params={params}"
        if not rows:
            return None
        if len(rows) > 1:
            raise exceptions.StoreQueryError(
                f"Expected a single aggregate row, got {len(rows)} for {context}"
            )
        return _value(rows[0], context)


def _error_of(payload: Any) -> str:
    if isinstance(payload, dict) and "error" in payload:
        return str(payload["error"])
    return "unknown error"


def _rows(payload: Any, context: str) -> List[List[Any]]:
    """Value rows of the single statement in a /query response."""
    if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
        raise exceptions.StoreQueryError(f"Malformed store response for {context}")
    results = payload["results"]
    if len(results) != 1 or not isinstance(results[0], dict):
        raise exceptions.StoreQueryError(
            f"Expected one statement result, got {len(results)} for {context}"
        )
    result = results[0]
    if "error" in result:
        raise exceptions.StoreQueryError(f"Store error: {result['error']} ({context})")
    series = result.get("series")
    if not series:
        return []
    if not isinstance(series, list) or len(series) != 1:
        raise exceptions.StoreQueryError(f"Expected one series for {context}")
    values = series[0].get("values") if isinstance(series[0], dict) else None
    if not isinstance(values, list):
        raise exceptions.StoreQueryError(f"Series without values for {context}")
    for row in values:
        if not isinstance(row, list) or len(row) != 2:
            raise exceptions.StoreQueryError(
                f"Expected [time, value] rows, got {row!r} for {context}"
            )
    return values


def _label(row: List[Any], context: str) -> str:
    try:
        return utils.format_label(row[0])
    except (TypeError, ValueError) as e:
        raise exceptions.StoreQueryError(
            f"Bad bucket time {row[0]!r} for {context}"
        ) from e


def _value(row: List[Any], context: str) -> Optional[float]:
    v = row[1]
    if v is None:
        return None
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise exceptions.StoreQueryError(f"Non-numeric value {v!r} for {context}")
    return float(v)
