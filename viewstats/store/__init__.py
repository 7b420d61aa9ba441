from __future__ import annotations

from .base import StoreQueryClient
from .frame import FrameStore
from .influx import InfluxConnection, InfluxStore

__all__ = ["StoreQueryClient", "FrameStore", "InfluxConnection", "InfluxStore"]
