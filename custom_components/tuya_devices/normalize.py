"""Conversion between Tuya raw ranges and the hub's 0..1 unit range.

Out-of-range calibration or vendor values are not clamped; they surface as
out-of-range unit values.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .const import (
    CONF_BRIGHTNESS,
    CONF_COLOUR,
    CONF_FAN_SPEED,
    CONF_TEMPERATURE,
    DEFAULT_BRIGHTNESS,
    DEFAULT_COLOUR,
    DEFAULT_TEMPERATURE,
)


@dataclass(frozen=True)
class CalibrationSpec:
    min: float
    max: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CalibrationSpec":
        return cls(data["min"], data["max"])


@dataclass(frozen=True)
class ColourSpec:
    h: CalibrationSpec
    s: CalibrationSpec
    v: CalibrationSpec

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ColourSpec":
        return cls(
            h=CalibrationSpec.from_dict(data["h"]),
            s=CalibrationSpec.from_dict(data["s"]),
            v=CalibrationSpec.from_dict(data["v"]),
        )


def normalize(raw: float, spec: CalibrationSpec) -> float:
    """Vendor value -> unit value."""
    return (raw - spec.min) / (spec.max - spec.min)


def denormalize(unit: float, spec: CalibrationSpec) -> float:
    """Unit value -> vendor value, the exact inverse of normalize."""
    return spec.min + unit * (spec.max - spec.min)


@dataclass(frozen=True)
class CalibrationSet:
    """All calibration specs stored for one device."""

    brightness: CalibrationSpec
    temperature: CalibrationSpec
    colour: ColourSpec
    fan_speed: CalibrationSpec | None = None

    @classmethod
    def from_store(cls, store: Mapping[str, Any]) -> "CalibrationSet":
        fan_speed = store.get(CONF_FAN_SPEED)
        return cls(
            brightness=CalibrationSpec.from_dict(
                store.get(CONF_BRIGHTNESS) or DEFAULT_BRIGHTNESS
            ),
            temperature=CalibrationSpec.from_dict(
                store.get(CONF_TEMPERATURE) or DEFAULT_TEMPERATURE
            ),
            colour=ColourSpec.from_dict(store.get(CONF_COLOUR) or DEFAULT_COLOUR),
            fan_speed=CalibrationSpec.from_dict(fan_speed) if fan_speed else None,
        )

    def for_code(self, code: str) -> CalibrationSpec | None:
        """Calibration applied to a plain numeric vendor code, if any."""
        if code in ("fan_speed", "fan_speed_percent"):
            return self.fan_speed
        return None
