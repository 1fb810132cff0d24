from __future__ import annotations

from homeassistant.helpers.entity import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN, Capability
from .coordinator import TuyaDeviceCoordinator


class TuyaBaseEntity(CoordinatorEntity[TuyaDeviceCoordinator]):
    """Shared entity behavior for Tuya platforms."""

    _attr_has_entity_name = True

    def __init__(self, coordinator, entry, *, object_id_suffix: str) -> None:
        super().__init__(coordinator)
        self.entry = entry
        self.device = coordinator.device
        self._attr_unique_id = f"{entry.entry_id}-{object_id_suffix}"
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, self.device.device_id)},
            name=entry.title,
            manufacturer="Tuya",
        )

    def _value(self, capability: Capability):
        return self.device.get_capability_value(capability)

    async def _async_write(self, capability: Capability, value) -> None:
        await self.device.async_trigger_capability_listener(capability, value)
        self.async_write_ha_state()
