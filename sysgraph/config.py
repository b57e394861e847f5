"""Resolved application configuration for the graph components.

An :class:`AppConfigFields` value is built once (from defaults or a plain
mapping) and passed explicitly to every component that needs it.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping

from sysgraph.constants import (
    DEFAULT_REFRESH_RATE_MILLISECONDS,
    DEFAULT_TIME_MILLISECONDS,
    STALE_MAX_MILLISECONDS,
    STALE_MIN_MILLISECONDS,
    TIME_CHANGE_MILLISECONDS,
)


class DataUnit(Enum):
    BIT = "bit"
    BYTE = "byte"


class AxisScaling(Enum):
    LINEAR = "linear"
    LOG = "log"


class TemperatureType(Enum):
    CELSIUS = "celsius"
    KELVIN = "kelvin"
    FAHRENHEIT = "fahrenheit"

    @property
    def symbol(self) -> str:
        return {"celsius": "°C", "kelvin": "K", "fahrenheit": "°F"}[self.value]

    def convert_celsius(self, celsius: float) -> float:
        """Convert a Celsius reading into this unit."""
        if self is TemperatureType.KELVIN:
            return celsius + 273.15
        if self is TemperatureType.FAHRENHEIT:
            return celsius * 9.0 / 5.0 + 32.0
        return celsius


@dataclass(frozen=True)
class AppConfigFields:
    """Options consumed by the time graphs, the projector and the harvester."""

    default_time_value: int = DEFAULT_TIME_MILLISECONDS
    time_interval: int = TIME_CHANGE_MILLISECONDS
    hide_time: bool = False
    autohide_time: bool = False
    use_dot: bool = False
    update_rate_in_milliseconds: int = DEFAULT_REFRESH_RATE_MILLISECONDS
    retention_ms: int = STALE_MAX_MILLISECONDS
    network_unit_type: DataUnit = DataUnit.BIT
    network_scale_type: AxisScaling = AxisScaling.LINEAR
    network_use_binary_prefix: bool = False
    temperature_type: TemperatureType = TemperatureType.CELSIUS

    def __post_init__(self) -> None:
        if self.time_interval <= 0:
            raise ValueError(f"time_interval must be positive, got {self.time_interval}")
        if not STALE_MIN_MILLISECONDS <= self.default_time_value <= STALE_MAX_MILLISECONDS:
            raise ValueError(
                f"default_time_value must be within [{STALE_MIN_MILLISECONDS}, "
                f"{STALE_MAX_MILLISECONDS}], got {self.default_time_value}"
            )
        if self.update_rate_in_milliseconds <= 0:
            raise ValueError(
                f"update_rate_in_milliseconds must be positive, got {self.update_rate_in_milliseconds}"
            )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "AppConfigFields":
        """Build a config from a plain mapping, e.g. a parsed settings file.

        Enum-typed options accept either the enum member or its lowercase name.
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(values) - set(known))
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

        enum_types = {
            "network_unit_type": DataUnit,
            "network_scale_type": AxisScaling,
            "temperature_type": TemperatureType,
        }
        kwargs = {}
        for key, value in values.items():
            enum_type = enum_types.get(key)
            if enum_type is not None and not isinstance(value, enum_type):
                try:
                    value = enum_type(str(value).lower())
                except ValueError:
                    raise ValueError(f"Invalid value {value!r} for {key}") from None
            kwargs[key] = value
        return cls(**kwargs)
