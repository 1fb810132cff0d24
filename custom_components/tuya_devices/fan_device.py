from __future__ import annotations
import logging
from typing import Any, Iterable

from .client import ColourData, TuyaCommand
from .const import (
    CONF_CATEGORY,
    CONF_ENABLE_LIGHT_SUPPORT,
    DEFAULT_ENABLE_LIGHT_SUPPORT,
    FAN_CAPABILITIES_MAPPING,
    LIGHT_CAPABILITIES,
    LIGHT_DEBOUNCE_SECONDS,
    LIGHT_GROUP_CAPABILITIES,
    LIGHT_MODE_COLOR,
    LIGHT_MODE_TEMPERATURE,
    LIGHT_TUYA_CAPABILITIES,
    WORK_MODE_COLOUR,
    WORK_MODE_WHITE,
    Capability,
    parse_tuya_capabilities,
)
from .device import TuyaDevice
from .mapping import CapabilityMap, DeviceCategory
from .normalize import denormalize, normalize

_LOGGER = logging.getLogger(__name__)


class TuyaFanDevice(TuyaDevice):
    """Multi-function fan, optionally with an integrated light."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.category = DeviceCategory.from_tag(self.get_store_value(CONF_CATEGORY))
        self.mapping = CapabilityMap.for_category(self.category)
        self._register_listeners()

    @staticmethod
    def default_capabilities(
        category, tuya_capabilities: Iterable[str], enable_light_support: bool
    ) -> list[str]:
        """Capability set for a freshly provisioned fan."""
        mapping = CapabilityMap.for_category(DeviceCategory.from_tag(category))
        codes = set(parse_tuya_capabilities(tuya_capabilities))
        caps: set[Capability] = set()
        for code, capability in mapping.read_write_items():
            if code in codes and capability not in LIGHT_CAPABILITIES:
                caps.add(capability)
        if enable_light_support:
            caps.update(_light_capabilities_for(codes, caps))
        return sorted(str(c) for c in caps)

    def _register_listeners(self) -> None:
        for code, capability in self.mapping.read_write_items():
            if self.has_capability(capability) and self.has_tuya_capability(code):
                self.register_capability_listener(
                    capability, self._command_listener(code, capability)
                )

        light_capabilities = [
            c for c in LIGHT_GROUP_CAPABILITIES if self.has_capability(c)
        ]
        if light_capabilities:
            self.register_multiple_capability_listener(
                light_capabilities,
                self.async_on_capabilities_light,
                LIGHT_DEBOUNCE_SECONDS,
            )

    def _command_listener(self, code: str, capability: Capability):
        spec = self._calibration_for(code, capability)

        async def _send(value):
            if spec is not None and isinstance(value, (int, float)) and not isinstance(
                value, bool
            ):
                value = denormalize(value, spec)
            await self.async_send_command(TuyaCommand(code, value))

        return _send

    def _calibration_for(self, code: str, capability: Capability):
        # Legacy speeds keep the raw vendor value
        if capability is not Capability.DIM:
            return None
        return self.calibration.for_code(code)

    async def async_on_tuya_status(
        self, status: dict[str, Any], changed_status_codes: list[str]
    ) -> None:
        for code, value in status.items():
            capability = self.mapping.hub_capability(code)
            if capability is None or not self.mapping.is_readable(code):
                continue
            spec = self._calibration_for(code, capability)
            if spec is not None and isinstance(value, (int, float)) and not isinstance(
                value, bool
            ):
                await self._async_safe_set_normalized(capability, value, spec)
            else:
                await self.async_safe_set_capability_value(capability, value)

        # Light
        work_mode = status.get("work_mode")
        light_temp = status.get("temp_value")
        light_dim = status.get("bright_value")
        light_colour = ColourData.from_value(status.get("colour_data"))

        if work_mode == WORK_MODE_WHITE:
            await self.async_safe_set_capability_value(
                Capability.LIGHT_MODE, LIGHT_MODE_TEMPERATURE
            )
        elif work_mode == WORK_MODE_COLOUR:
            await self.async_safe_set_capability_value(
                Capability.LIGHT_MODE, LIGHT_MODE_COLOR
            )
        else:
            await self.async_safe_set_capability_value(Capability.LIGHT_MODE, None)

        if light_temp:
            await self._async_safe_set_normalized(
                Capability.LIGHT_TEMPERATURE, light_temp, self.calibration.temperature
            )

        if light_dim and work_mode in (WORK_MODE_WHITE, None):
            await self._async_safe_set_normalized(
                Capability.DIM_LIGHT, light_dim, self.calibration.brightness
            )

        if light_colour is not None:
            spec = self.calibration.colour
            await self._async_safe_set_normalized(
                Capability.LIGHT_HUE, light_colour.h, spec.h
            )
            await self._async_safe_set_normalized(
                Capability.LIGHT_SATURATION, light_colour.s, spec.s
            )
            if work_mode == WORK_MODE_COLOUR:
                await self._async_safe_set_normalized(
                    Capability.DIM_LIGHT, light_colour.v, spec.v
                )

    async def _async_safe_set_normalized(self, capability, raw, spec) -> None:
        try:
            value = normalize(raw, spec)
        except (ArithmeticError, TypeError) as e:
            _LOGGER.warning(
                "%s: cannot normalize %r for %s with %s: %s",
                self.device_id,
                raw,
                capability,
                spec,
                e,
            )
            return
        await self.async_safe_set_capability_value(capability, value)

    async def async_on_capabilities_light(self, values: dict[str, Any]) -> None:
        """Compose one command batch from a coalesced light write."""

        def _value(capability):
            if capability in values:
                return values[capability]
            return self.get_capability_value(capability)

        light_dim = _value(Capability.DIM_LIGHT)
        light_mode = _value(Capability.LIGHT_MODE)
        light_hue = _value(Capability.LIGHT_HUE)
        light_saturation = _value(Capability.LIGHT_SATURATION)
        light_temperature = _value(Capability.LIGHT_TEMPERATURE)

        commands: list[TuyaCommand] = []

        if not light_mode:
            if self.has_capability(Capability.LIGHT_HUE):
                light_mode = LIGHT_MODE_COLOR
            else:
                light_mode = LIGHT_MODE_TEMPERATURE

        if self.has_tuya_capability("work_mode"):
            commands.append(
                TuyaCommand(
                    "work_mode",
                    WORK_MODE_COLOUR if light_mode == LIGHT_MODE_COLOR else WORK_MODE_WHITE,
                )
            )

        if light_mode == LIGHT_MODE_COLOR:
            spec = self.calibration.colour
            commands.append(
                TuyaCommand(
                    "colour_data",
                    ColourData(
                        h=denormalize(light_hue or 0, spec.h),
                        s=denormalize(light_saturation or 0, spec.s),
                        v=denormalize(light_dim or 0, spec.v),
                    ),
                )
            )
        else:
            if (
                light_dim
                and self.mapping.is_write_only("bright_value")
                and self.has_tuya_capability("bright_value")
            ):
                commands.append(
                    TuyaCommand(
                        "bright_value", denormalize(light_dim, self.calibration.brightness)
                    )
                )
            # Temperature reuses the brightness range
            if (
                light_temperature
                and self.mapping.is_write_only("temp_value")
                and self.has_tuya_capability("temp_value")
            ):
                commands.append(
                    TuyaCommand(
                        "temp_value",
                        denormalize(light_temperature, self.calibration.brightness),
                    )
                )

        if commands:
            await self.async_send_commands(commands)

    async def async_on_settings(
        self, changed_keys: list[str], new_settings: dict[str, Any]
    ) -> None:
        await super().async_on_settings(changed_keys, new_settings)
        if CONF_ENABLE_LIGHT_SUPPORT not in changed_keys:
            return

        if new_settings.get(CONF_ENABLE_LIGHT_SUPPORT, DEFAULT_ENABLE_LIGHT_SUPPORT):
            for code in LIGHT_TUYA_CAPABILITIES:
                if self.has_tuya_capability(code):
                    await self.async_add_capability(FAN_CAPABILITIES_MAPPING[code])
            if self.has_tuya_capability("colour"):
                await self.async_add_capability(Capability.LIGHT_HUE)
                await self.async_add_capability(Capability.LIGHT_SATURATION)
                await self.async_add_capability(Capability.DIM_LIGHT)
            if self.has_capability(Capability.LIGHT_TEMPERATURE) and self.has_capability(
                Capability.LIGHT_HUE
            ):
                await self.async_add_capability(Capability.LIGHT_MODE)
        else:
            for capability in LIGHT_CAPABILITIES:
                await self.async_remove_capability(capability)


def _light_capabilities_for(
    codes: set[str], present: set[Capability]
) -> set[Capability]:
    caps = {FAN_CAPABILITIES_MAPPING[c] for c in LIGHT_TUYA_CAPABILITIES if c in codes}
    if "colour" in codes:
        caps.update(
            (Capability.LIGHT_HUE, Capability.LIGHT_SATURATION, Capability.DIM_LIGHT)
        )
    all_caps = caps | present
    if Capability.LIGHT_TEMPERATURE in all_caps and Capability.LIGHT_HUE in all_caps:
        caps.add(Capability.LIGHT_MODE)
    return caps
