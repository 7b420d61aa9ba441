from __future__ import annotations
from typing import Final, Dict

DEFAULT_TZ: Final[str] = "UTC"
INDEX_NAME: Final[str] = "time"

# Store defaults (InfluxDB 1.x)
DEFAULT_STORE_URI: Final[str] = "http://127.0.0.1:8086"
DEFAULT_STORE_USER: Final[str] = "root"
DEFAULT_STORE_PASSWORD: Final[str] = "root"
DEFAULT_STORE_DB: Final[str] = "opencast"
DEFAULT_STORE_TIMEOUT_S: Final[float] = 10.0

# Views providers
DEFAULT_STATISTIC: Final[str] = "views"
VIEWS_MEASUREMENT: Final[str] = "impressions"
VIEWS_VARIABLE: Final[str] = "value"
CUMULATIVE_AGGREGATION: Final[str] = "SUM"

# resource type -> tag column holding its identifier
RESOURCE_ID_COLUMNS: Dict[str, str] = {
    "episode": "episodeId",
    "series": "seriesId",
    "organization": "organizationId",
}

# Store sub-bucket widths for fixed-duration resolutions
BUCKET_WIDTHS: Dict[str, str] = {
    "hourly": "1h",
    "daily": "1d",
    "weekly": "1w",
}
