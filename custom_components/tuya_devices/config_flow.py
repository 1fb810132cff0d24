from __future__ import annotations
import voluptuous as vol
from homeassistant import config_entries
from homeassistant.const import CONF_NAME
from homeassistant.core import callback
from .const import (
    DOMAIN,
    DEVICE_TYPES,
    DEVICE_TYPE_FAN,
    CONF_DEVICE_ID,
    CONF_DEVICE_TYPE,
    CONF_CATEGORY,
    CONF_TUYA_CAPABILITIES,
    CONF_BRIGHTNESS,
    CONF_TEMPERATURE,
    CONF_COLOUR,
    CONF_FAN_SPEED,
    CONF_ENABLE_LIGHT_SUPPORT,
    CONF_USE_ALARM_TIMEOUT,
    CONF_ALARM_TIMEOUT,
    DEFAULT_BRIGHTNESS,
    DEFAULT_TEMPERATURE,
    DEFAULT_COLOUR,
    DEFAULT_ENABLE_LIGHT_SUPPORT,
    DEFAULT_USE_ALARM_TIMEOUT,
    DEFAULT_ALARM_TIMEOUT,
    normalize_alarm_timeout,
    parse_tuya_capabilities,
)

CONF_FAN_SPEED_MIN = "fan_speed_min"
CONF_FAN_SPEED_MAX = "fan_speed_max"


class TuyaDevicesConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Config flow registering a provisioned Tuya device."""

    VERSION = 1

    async def async_step_user(self, user_input=None):
        errors = {}
        if user_input is not None:
            device_id = (user_input.get(CONF_DEVICE_ID) or "").strip()
            if not device_id:
                errors["base"] = "device_id_required"
            elif (
                user_input.get(CONF_FAN_SPEED_MIN, 1)
                >= user_input.get(CONF_FAN_SPEED_MAX, 100)
            ):
                errors["base"] = "invalid_fan_speed_range"
            else:
                await self.async_set_unique_id(device_id)
                self._abort_if_unique_id_configured()
                device_type = user_input[CONF_DEVICE_TYPE]
                data = {
                    CONF_DEVICE_ID: device_id,
                    CONF_DEVICE_TYPE: device_type,
                    CONF_CATEGORY: (user_input.get(CONF_CATEGORY) or "").strip(),
                    CONF_TUYA_CAPABILITIES: parse_tuya_capabilities(
                        user_input.get(CONF_TUYA_CAPABILITIES)
                    ),
                    CONF_BRIGHTNESS: dict(DEFAULT_BRIGHTNESS),
                    CONF_TEMPERATURE: dict(DEFAULT_TEMPERATURE),
                    CONF_COLOUR: {k: dict(v) for k, v in DEFAULT_COLOUR.items()},
                    CONF_FAN_SPEED: {
                        "min": user_input.get(CONF_FAN_SPEED_MIN, 1),
                        "max": user_input.get(CONF_FAN_SPEED_MAX, 100),
                    },
                }
                if device_type == DEVICE_TYPE_FAN:
                    options = {CONF_ENABLE_LIGHT_SUPPORT: DEFAULT_ENABLE_LIGHT_SUPPORT}
                else:
                    options = {
                        CONF_USE_ALARM_TIMEOUT: DEFAULT_USE_ALARM_TIMEOUT,
                        CONF_ALARM_TIMEOUT: DEFAULT_ALARM_TIMEOUT,
                    }
                name = (user_input.get(CONF_NAME) or "").strip()
                return self.async_create_entry(
                    title=name or f"Tuya {device_type} ({device_id})",
                    data=data,
                    options=options,
                )

        schema = vol.Schema(
            {
                vol.Required(CONF_DEVICE_ID, default=""): str,
                vol.Optional(CONF_NAME, default=""): str,
                vol.Required(CONF_DEVICE_TYPE, default=DEVICE_TYPE_FAN): vol.In(
                    DEVICE_TYPES
                ),
                vol.Optional(CONF_CATEGORY, default=""): str,
                vol.Optional(CONF_TUYA_CAPABILITIES, default=""): str,
                vol.Optional(CONF_FAN_SPEED_MIN, default=1): int,
                vol.Optional(CONF_FAN_SPEED_MAX, default=100): int,
            }
        )
        return self.async_show_form(step_id="user", data_schema=schema, errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return TuyaDevicesOptionsFlowHandler(config_entry)


class TuyaDevicesOptionsFlowHandler(config_entries.OptionsFlow):
    """Options flow editing the device settings."""

    def __init__(self, config_entry):
        # Avoid assigning to deprecated attribute; store locally
        self._config_entry = config_entry

    async def async_step_init(self, user_input=None):
        is_fan = self._config_entry.data.get(CONF_DEVICE_TYPE) == DEVICE_TYPE_FAN
        if user_input is not None:
            if not is_fan and CONF_ALARM_TIMEOUT in user_input:
                user_input = {
                    **user_input,
                    CONF_ALARM_TIMEOUT: normalize_alarm_timeout(
                        user_input[CONF_ALARM_TIMEOUT]
                    ),
                }
            return self.async_create_entry(title="", data=user_input)

        opts = self._config_entry.options
        if is_fan:
            schema = vol.Schema(
                {
                    vol.Required(
                        CONF_ENABLE_LIGHT_SUPPORT,
                        default=opts.get(
                            CONF_ENABLE_LIGHT_SUPPORT, DEFAULT_ENABLE_LIGHT_SUPPORT
                        ),
                    ): bool,
                }
            )
        else:
            schema = vol.Schema(
                {
                    vol.Required(
                        CONF_USE_ALARM_TIMEOUT,
                        default=opts.get(CONF_USE_ALARM_TIMEOUT, DEFAULT_USE_ALARM_TIMEOUT),
                    ): bool,
                    vol.Required(
                        CONF_ALARM_TIMEOUT,
                        default=opts.get(CONF_ALARM_TIMEOUT, DEFAULT_ALARM_TIMEOUT),
                    ): int,
                }
            )
        return self.async_show_form(step_id="init", data_schema=schema)
