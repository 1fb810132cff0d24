from __future__ import annotations
from homeassistant.components.light import (
    ATTR_BRIGHTNESS,
    ATTR_COLOR_TEMP_KELVIN,
    ATTR_HS_COLOR,
    ColorMode,
    LightEntity,
)
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.config_entries import ConfigEntry
from .const import (
    DOMAIN,
    CONF_DEVICE_TYPE,
    DEVICE_TYPE_FAN,
    LIGHT_CAPABILITIES,
    LIGHT_MODE_COLOR,
    LIGHT_MODE_TEMPERATURE,
    Capability,
)
from .entity import TuyaBaseEntity

MIN_KELVIN = 2700
MAX_KELVIN = 6500


class TuyaFanLight(TuyaBaseEntity, LightEntity):
    _attr_name = "Light"
    _attr_min_color_temp_kelvin = MIN_KELVIN
    _attr_max_color_temp_kelvin = MAX_KELVIN

    def __init__(self, coordinator, entry):
        super().__init__(coordinator, entry, object_id_suffix="light")
        dev = self.device
        modes: set[ColorMode] = set()
        if dev.has_capability(Capability.LIGHT_HUE):
            modes.add(ColorMode.HS)
        if dev.has_capability(Capability.LIGHT_TEMPERATURE):
            modes.add(ColorMode.COLOR_TEMP)
        if not modes:
            if dev.has_capability(Capability.DIM_LIGHT):
                modes.add(ColorMode.BRIGHTNESS)
            else:
                modes.add(ColorMode.ONOFF)
        self._attr_supported_color_modes = modes

    @property
    def color_mode(self) -> ColorMode:
        modes = self._attr_supported_color_modes
        if len(modes) == 1:
            return next(iter(modes))
        mode = self._value(Capability.LIGHT_MODE)
        if mode == LIGHT_MODE_TEMPERATURE:
            return ColorMode.COLOR_TEMP
        # Colour mode, or no mode with a hue capability present
        return ColorMode.HS

    @property
    def is_on(self):
        if self.device.has_capability(Capability.ONOFF_LIGHT):
            return bool(self._value(Capability.ONOFF_LIGHT))
        return bool(self._value(Capability.DIM_LIGHT))

    @property
    def brightness(self):
        dim = self._value(Capability.DIM_LIGHT)
        if dim is None:
            return None
        return max(0, min(255, round(dim * 255)))

    @property
    def hs_color(self):
        hue = self._value(Capability.LIGHT_HUE)
        sat = self._value(Capability.LIGHT_SATURATION)
        if hue is None or sat is None:
            return None
        return (hue * 360, sat * 100)

    @property
    def color_temp_kelvin(self):
        temp = self._value(Capability.LIGHT_TEMPERATURE)
        if temp is None:
            return None
        return round(MIN_KELVIN + temp * (MAX_KELVIN - MIN_KELVIN))

    async def async_turn_on(self, **kwargs):
        dev = self.device
        if dev.has_capability(Capability.ONOFF_LIGHT) and not self.is_on:
            await self._async_write(Capability.ONOFF_LIGHT, True)

        writes = {}
        if ATTR_BRIGHTNESS in kwargs and dev.has_capability(Capability.DIM_LIGHT):
            writes[Capability.DIM_LIGHT] = kwargs[ATTR_BRIGHTNESS] / 255
        if ATTR_HS_COLOR in kwargs and dev.has_capability(Capability.LIGHT_HUE):
            hue, sat = kwargs[ATTR_HS_COLOR]
            writes[Capability.LIGHT_HUE] = hue / 360
            writes[Capability.LIGHT_SATURATION] = sat / 100
            writes[Capability.LIGHT_MODE] = LIGHT_MODE_COLOR
        if ATTR_COLOR_TEMP_KELVIN in kwargs and dev.has_capability(
            Capability.LIGHT_TEMPERATURE
        ):
            kelvin = kwargs[ATTR_COLOR_TEMP_KELVIN]
            writes[Capability.LIGHT_TEMPERATURE] = (kelvin - MIN_KELVIN) / (
                MAX_KELVIN - MIN_KELVIN
            )
            writes[Capability.LIGHT_MODE] = LIGHT_MODE_TEMPERATURE

        for capability, value in writes.items():
            if dev.has_capability(capability):
                await self._async_write(capability, value)

    async def async_turn_off(self, **kwargs):
        if self.device.has_capability(Capability.ONOFF_LIGHT):
            await self._async_write(Capability.ONOFF_LIGHT, False)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback) -> None:
    if entry.data.get(CONF_DEVICE_TYPE) != DEVICE_TYPE_FAN:
        return
    coord = hass.data[DOMAIN][entry.entry_id]
    # Only add the light entity while light capabilities are exposed
    if any(coord.device.has_capability(c) for c in LIGHT_CAPABILITIES):
        async_add_entities([TuyaFanLight(coord, entry)])
