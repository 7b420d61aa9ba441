from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from . import canon, exceptions
from .types import ProviderConfig

logger = logging.getLogger(__name__)

_Key = Tuple[str, str]


def _index(providers: Iterable[ProviderConfig]) -> Mapping[_Key, ProviderConfig]:
    table: Dict[_Key, ProviderConfig] = {}
    ids = set()
    for p in providers:
        key = (p.resource_type, p.statistic)
        if key in table:
            raise exceptions.ConfigError(
                f"Duplicate provider for resource type {p.resource_type!r} "
                f"and statistic {p.statistic!r}"
            )
        if p.provider_id in ids:
            raise exceptions.ConfigError(f"Duplicate provider id {p.provider_id!r}")
        ids.add(p.provider_id)
        table[key] = p
    return MappingProxyType(table)


class ProviderRegistry:
    """
    Lookup of (resource type, statistic kind) -> ProviderConfig.

    The table is read-only; replace() swaps in a whole new table with a single
    reference assignment, so a reader sees either the old or the new table.
    """

    def __init__(self, providers: Iterable[ProviderConfig] = ()):
        self._table = _index(providers)

    def resolve(self, resource_type: str, statistic: str) -> ProviderConfig:
        table = self._table
        try:
            return table[(resource_type, statistic)]
        except KeyError:
            raise exceptions.UnknownStatisticError(
                f"No {statistic!r} statistic configured for resource type "
                f"{resource_type!r}"
            ) from None

    def get(self, provider_id: str) -> ProviderConfig:
        for p in self._table.values():
            if p.provider_id == provider_id:
                return p
        raise exceptions.UnknownStatisticError(f"Unknown provider {provider_id!r}")

    def providers(self, resource_type: Optional[str] = None) -> List[ProviderConfig]:
        found = [
            p
            for p in self._table.values()
            if resource_type is None or p.resource_type == resource_type
        ]
        return sorted(found, key=lambda p: p.provider_id)

    def replace(self, providers: Iterable[ProviderConfig]) -> None:
        table = _index(providers)
        self._table = table
        logger.debug("Provider registry replaced (%d providers)", len(table))

    def __len__(self) -> int:
        return len(self._table)

    def __contains__(self, key: object) -> bool:
        return key in self._table


def views_provider(resource_type: str) -> ProviderConfig:
    """SUM of view counts per resource, as recorded by the view tracker."""
    return ProviderConfig(
        provider_id=f"{resource_type}.views.sum",
        resource_type=resource_type,
        aggregation=canon.CUMULATIVE_AGGREGATION,
        aggregation_variable=canon.VIEWS_VARIABLE,
        measurement=canon.VIEWS_MEASUREMENT,
        resource_id_column=canon.RESOURCE_ID_COLUMNS[resource_type],
        statistic=canon.DEFAULT_STATISTIC,
        title=f"{resource_type.capitalize()} views",
        description=f"Accumulated views of the {resource_type} over time",
    )


def default_registry() -> ProviderRegistry:
    return ProviderRegistry(views_provider(t) for t in canon.RESOURCE_ID_COLUMNS)
