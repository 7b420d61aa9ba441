from . import (
    canon,
    exceptions,
    types,
    utils,
    validate,
    calendar,
    planner,
    store,
    baseline,
    assemble,
    registry,
    config,
    service,
    formats,
)
from .service import StatisticsService

__all__ = [
    "canon",
    "exceptions",
    "types",
    "utils",
    "validate",
    "calendar",
    "planner",
    "store",
    "baseline",
    "assemble",
    "registry",
    "config",
    "service",
    "formats",
    "StatisticsService",
]
