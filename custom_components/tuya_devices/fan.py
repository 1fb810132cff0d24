from __future__ import annotations
import math

from homeassistant.components.fan import FanEntity, FanEntityFeature
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.config_entries import ConfigEntry
from homeassistant.util.percentage import (
    percentage_to_ranged_value,
    ranged_value_to_percentage,
)
from .const import DOMAIN, DEVICE_TYPE_FAN, CONF_DEVICE_TYPE, Capability
from .entity import TuyaBaseEntity

_DIRECTION_FEATURE = getattr(
    FanEntityFeature, "SET_DIRECTION", FanEntityFeature.DIRECTION
)
_TURN_ON_FEATURE = getattr(FanEntityFeature, "TURN_ON", 0)
_TURN_OFF_FEATURE = getattr(FanEntityFeature, "TURN_OFF", 0)

# Legacy speeds without calibration are reported on a 1..100 scale
_DEFAULT_LEGACY_RANGE = (1, 100)


def _as_number(value) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class TuyaFan(TuyaBaseEntity, FanEntity):
    _attr_name = None

    def __init__(self, coordinator, entry):
        super().__init__(coordinator, entry, object_id_suffix="fan")
        dev = self.device
        features = _TURN_ON_FEATURE | _TURN_OFF_FEATURE
        if dev.has_capability(Capability.DIM) or dev.has_capability(
            Capability.LEGACY_FAN_SPEED
        ):
            features |= FanEntityFeature.SET_SPEED
        if dev.has_capability(Capability.FAN_DIRECTION):
            features |= _DIRECTION_FEATURE
        self._attr_supported_features = features

    @property
    def _legacy_range(self) -> tuple[float, float]:
        spec = self.device.calibration.fan_speed
        return (spec.min, spec.max) if spec else _DEFAULT_LEGACY_RANGE

    @property
    def speed_count(self) -> int:
        if self.device.has_capability(Capability.LEGACY_FAN_SPEED):
            low, high = self._legacy_range
            return max(1, int(high - low + 1))
        return 100

    @property
    def is_on(self):
        if self.device.has_capability(Capability.ONOFF):
            return bool(self._value(Capability.ONOFF))
        return bool(self.percentage)

    @property
    def percentage(self):
        if self.device.has_capability(Capability.DIM):
            dim = _as_number(self._value(Capability.DIM))
            return None if dim is None else round(dim * 100)
        if self.device.has_capability(Capability.LEGACY_FAN_SPEED):
            speed = _as_number(self._value(Capability.LEGACY_FAN_SPEED))
            if speed is None:
                return None
            return ranged_value_to_percentage(self._legacy_range, speed)
        return None

    async def async_set_percentage(self, percentage: int) -> None:
        p = percentage or 0
        if p <= 0 and self.device.has_capability(Capability.ONOFF):
            await self.async_turn_off()
            return
        if self.device.has_capability(Capability.ONOFF) and not self.is_on:
            await self._async_write(Capability.ONOFF, True)
        if self.device.has_capability(Capability.DIM):
            await self._async_write(Capability.DIM, p / 100)
        elif self.device.has_capability(Capability.LEGACY_FAN_SPEED):
            speed = math.ceil(percentage_to_ranged_value(self._legacy_range, p))
            await self._async_write(Capability.LEGACY_FAN_SPEED, str(speed))

    async def async_turn_on(
        self, percentage: int | None = None, preset_mode: str | None = None, **kwargs
    ) -> None:
        if self.device.has_capability(Capability.ONOFF):
            await self._async_write(Capability.ONOFF, True)
        if percentage is not None:
            await self.async_set_percentage(percentage)

    async def async_turn_off(self, **kwargs) -> None:
        if self.device.has_capability(Capability.ONOFF):
            await self._async_write(Capability.ONOFF, False)
        elif self.device.has_capability(Capability.DIM):
            await self._async_write(Capability.DIM, 0)

    @property
    def current_direction(self):
        if not self.device.has_capability(Capability.FAN_DIRECTION):
            return None
        return self._value(Capability.FAN_DIRECTION)

    async def async_set_direction(self, direction: str) -> None:
        if not self.device.has_capability(Capability.FAN_DIRECTION):
            return
        await self._async_write(Capability.FAN_DIRECTION, direction)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    if entry.data.get(CONF_DEVICE_TYPE) != DEVICE_TYPE_FAN:
        return
    coord = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([TuyaFan(coord, entry)])
