from __future__ import annotations

from homeassistant.components.binary_sensor import (
    BinarySensorDeviceClass,
    BinarySensorEntity,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import CONF_DEVICE_TYPE, DEVICE_TYPE_CONTACT_SENSOR, DOMAIN, Capability
from .entity import TuyaBaseEntity


class TuyaAlarmBinarySensor(TuyaBaseEntity, BinarySensorEntity):
    """Binary sensor mirroring one alarm capability."""

    def __init__(self, coordinator, entry, capability: Capability, device_class, name):
        super().__init__(coordinator, entry, object_id_suffix=str(capability))
        self._capability = capability
        self._attr_device_class = device_class
        self._attr_name = name

    @property
    def is_on(self):
        value = self._value(self._capability)
        return None if value is None else bool(value)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    if entry.data.get(CONF_DEVICE_TYPE) != DEVICE_TYPE_CONTACT_SENSOR:
        return
    coord = hass.data[DOMAIN][entry.entry_id]
    entities = []
    if coord.device.has_capability(Capability.ALARM_CONTACT):
        entities.append(
            TuyaAlarmBinarySensor(
                coord, entry, Capability.ALARM_CONTACT, BinarySensorDeviceClass.DOOR, None
            )
        )
    if coord.device.has_capability(Capability.ALARM_BATTERY):
        entities.append(
            TuyaAlarmBinarySensor(
                coord, entry, Capability.ALARM_BATTERY, BinarySensorDeviceClass.BATTERY, "Battery low"
            )
        )
    async_add_entities(entities)
