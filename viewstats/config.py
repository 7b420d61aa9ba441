from __future__ import annotations

from typing import Any, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import canon, exceptions, validate
from .registry import ProviderRegistry, views_provider
from .types import RESOLUTIONS, ProviderConfig, Resolution


class StoreSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    uri: str = canon.DEFAULT_STORE_URI
    username: str = canon.DEFAULT_STORE_USER
    password: str = Field(default=canon.DEFAULT_STORE_PASSWORD, repr=False)
    database: str = canon.DEFAULT_STORE_DB
    timeout_s: float = Field(default=canon.DEFAULT_STORE_TIMEOUT_S, gt=0)


class ProviderSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    resource_type: str
    statistic: str = canon.DEFAULT_STATISTIC
    title: str = ""
    description: str = ""
    aggregation: str = canon.CUMULATIVE_AGGREGATION
    aggregation_variable: str = canon.VIEWS_VARIABLE
    measurement: str = canon.VIEWS_MEASUREMENT
    resource_id_name: str
    resolutions: Tuple[Resolution, ...] = RESOLUTIONS

    @field_validator("aggregation")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("resolutions", mode="before")
    @classmethod
    def _known_resolutions(cls, v: Any) -> Tuple[Resolution, ...]:
        if isinstance(v, str):
            v = [v]
        out = tuple(validate.parse_resolution(r) for r in v)
        if not out:
            raise ValueError("at least one resolution is required")
        return out

    @classmethod
    def from_provider(cls, p: ProviderConfig) -> "ProviderSettings":
        return cls(
            id=p.provider_id,
            resource_type=p.resource_type,
            statistic=p.statistic,
            title=p.title,
            description=p.description,
            aggregation=p.aggregation,
            aggregation_variable=p.aggregation_variable,
            measurement=p.measurement,
            resource_id_name=p.resource_id_column,
            resolutions=p.resolutions,
        )

    def to_provider(self) -> ProviderConfig:
        return ProviderConfig(
            provider_id=self.id,
            resource_type=self.resource_type,
            aggregation=self.aggregation,
            aggregation_variable=self.aggregation_variable,
            measurement=self.measurement,
            resource_id_column=self.resource_id_name,
            statistic=self.statistic,
            title=self.title,
            description=self.description,
            resolutions=self.resolutions,
        )


class StatisticsSettings(BaseModel):
    """One immutable configuration snapshot; replace it, never mutate it."""

    model_config = ConfigDict(frozen=True)

    store: StoreSettings = Field(default_factory=StoreSettings)
    providers: Tuple[ProviderSettings, ...] = Field(
        default_factory=lambda: tuple(
            ProviderSettings.from_provider(views_provider(t))
            for t in canon.RESOURCE_ID_COLUMNS
        )
    )
    timezone: str = canon.DEFAULT_TZ

    @field_validator("timezone")
    @classmethod
    def _known_tz(cls, v: str) -> str:
        return validate.check_timezone(v)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StatisticsSettings":
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise exceptions.ConfigError(
                f"Invalid statistics configuration: {e}"
            ) from e


def default_config() -> StatisticsSettings:
    return StatisticsSettings()


def build_registry(settings: StatisticsSettings) -> ProviderRegistry:
    return ProviderRegistry(p.to_provider() for p in settings.providers)
