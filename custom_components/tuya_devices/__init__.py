from __future__ import annotations
import logging

from homeassistant.core import HomeAssistant, callback
from homeassistant.config_entries import ConfigEntry
from homeassistant.exceptions import ConfigEntryNotReady
from homeassistant.helpers.dispatcher import async_dispatcher_connect
from .client import TuyaDeviceClient
from .const import (
    DOMAIN,
    DATA_TRANSPORT,
    SIGNAL_TUYA_STATUS,
    CONF_CAPABILITIES,
    CONF_CATEGORY,
    CONF_DEVICE_ID,
    CONF_DEVICE_TYPE,
    CONF_ENABLE_LIGHT_SUPPORT,
    CONF_TUYA_CAPABILITIES,
    DEFAULT_ENABLE_LIGHT_SUPPORT,
    DEVICE_TYPE_CONTACT_SENSOR,
)
from .contact_device import TuyaContactSensorDevice
from .coordinator import TuyaDeviceCoordinator
from .device import TuyaDevice
from .fan_device import TuyaFanDevice

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[str] = ["fan", "light", "binary_sensor", "sensor"]


def build_device(entry: ConfigEntry) -> TuyaDevice:
    """Create the device controller for an entry, restoring its capability set."""
    data = entry.data
    settings = dict(entry.options or {})
    capabilities = data.get(CONF_CAPABILITIES)
    if data.get(CONF_DEVICE_TYPE) == DEVICE_TYPE_CONTACT_SENSOR:
        if capabilities is None:
            capabilities = TuyaContactSensorDevice.default_capabilities(
                data.get(CONF_TUYA_CAPABILITIES)
            )
        return TuyaContactSensorDevice(
            data[CONF_DEVICE_ID], dict(data), settings, capabilities
        )
    if capabilities is None:
        capabilities = TuyaFanDevice.default_capabilities(
            data.get(CONF_CATEGORY),
            data.get(CONF_TUYA_CAPABILITIES),
            settings.get(CONF_ENABLE_LIGHT_SUPPORT, DEFAULT_ENABLE_LIGHT_SUPPORT),
        )
    return TuyaFanDevice(data[CONF_DEVICE_ID], dict(data), settings, capabilities)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry):
    transport = hass.data.get(DOMAIN, {}).get(DATA_TRANSPORT)
    if transport is None:
        raise ConfigEntryNotReady("No Tuya transport registered")

    device = build_device(entry)
    client = TuyaDeviceClient(transport, device.device_id)
    coord = TuyaDeviceCoordinator(hass, device, client, config_entry=entry)
    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coord

    if CONF_CAPABILITIES not in entry.data:
        _persist_capabilities(hass, entry, device.capabilities.as_list())
    device.on_capabilities_changed = lambda caps: _persist_capabilities(hass, entry, caps)

    @callback
    def _on_status(status, changed=None):
        # One reducer pass per push; pushes never wait on each other
        hass.async_create_task(coord.async_handle_status(status, changed))

    entry.async_on_unload(
        async_dispatcher_connect(
            hass, SIGNAL_TUYA_STATUS.format(device.device_id), _on_status
        )
    )

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    entry.async_on_unload(entry.add_update_listener(async_options_updated))
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry):
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    coord = hass.data[DOMAIN].pop(entry.entry_id, None)
    if coord is not None:
        # Send light writes still waiting in the debounce window
        await coord.device.async_flush_pending_writes()
        cancel_timers = getattr(coord.device, "async_cancel_alarm_timers", None)
        if cancel_timers is not None:
            cancel_timers()
    return unload_ok


def _persist_capabilities(hass: HomeAssistant, entry: ConfigEntry, capabilities: list[str]):
    hass.config_entries.async_update_entry(
        entry, data={**entry.data, CONF_CAPABILITIES: list(capabilities)}
    )


async def async_options_updated(hass: HomeAssistant, entry: ConfigEntry):
    coord = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if coord is None:
        return
    device = coord.device
    new_settings = dict(entry.options)
    changed_keys = [
        key
        for key in set(device.settings) | set(new_settings)
        if device.settings.get(key) != new_settings.get(key)
    ]
    if not changed_keys:
        return

    before = device.capabilities.as_list()
    await device.async_on_settings(changed_keys, new_settings)
    if device.capabilities.as_list() != before:
        # Platforms pick up the new capability set on reload
        await hass.config_entries.async_reload(entry.entry_id)
