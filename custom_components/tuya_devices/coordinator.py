from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .client import ColourData, TuyaCommand, TuyaDeviceClient, TuyaTransportError, parse_status
from .device import TuyaDevice

_LOGGER = logging.getLogger(__name__)


class TuyaDeviceCoordinator(DataUpdateCoordinator):
    """Push coordinator for one Tuya device.

    Keeps the merged vendor status snapshot; every push runs the device's
    status reducer against it. Command sends are fire-and-forget: failures
    are logged and counted, never retried.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        device: TuyaDevice,
        client: TuyaDeviceClient,
        config_entry: ConfigEntry | None = None,
    ):
        super().__init__(
            hass,
            logger=_LOGGER,
            config_entry=config_entry,
            name=f"tuya_devices {device.device_id}",
            update_interval=None,
        )
        self.device = device
        self.client = client
        self.data: dict[str, Any] = {}
        self._last_status_at: datetime | None = None
        self._last_command_at: datetime | None = None
        self._consecutive_failures = 0
        self._last_error: str | None = None
        device.on_state_changed = self._on_device_state_changed
        device.send_commands = self.async_send_commands

    async def _async_update_data(self):
        # Status is pushed; nothing to poll
        return self.data

    def _on_device_state_changed(self) -> None:
        self.async_update_listeners()

    async def async_handle_status(
        self, status: dict[str, Any], changed: list[str] | None = None
    ) -> None:
        status = parse_status(status)
        previous = self.data or {}
        if changed is None:
            changed = [code for code, value in status.items() if previous.get(code) != value]
        merged = {**previous, **status}
        self._last_status_at = datetime.now(timezone.utc)
        await self.device.async_on_tuya_status(merged, list(changed))
        self.async_set_updated_data(merged)

    async def async_send_commands(self, commands: list[TuyaCommand]) -> None:
        self._last_command_at = datetime.now(timezone.utc)
        try:
            await self.client.async_send_commands(commands)
        except TuyaTransportError as e:
            self._record_failure(str(e))
            _LOGGER.warning(
                "Sending %s to %s failed: %s",
                [c.code for c in commands],
                self.device.device_id,
                e,
            )
            return
        except Exception as e:  # safeguard against transport bugs
            self._record_failure(str(e) or type(e).__name__)
            _LOGGER.error("Unexpected error sending commands to %s: %s", self.device.device_id, e)
            return
        self._consecutive_failures = 0
        self._last_error = None

    def _record_failure(self, error: str) -> None:
        self._consecutive_failures += 1
        self._last_error = error

    def diagnostics_snapshot(self) -> dict[str, Any]:
        return {
            "device_id": self.device.device_id,
            "capabilities": self.device.capabilities.as_list(),
            "status": {
                code: value.as_dict() if isinstance(value, ColourData) else value
                for code, value in (self.data or {}).items()
            },
            "last_status_at": self._last_status_at.isoformat() if self._last_status_at else None,
            "last_command_at": self._last_command_at.isoformat() if self._last_command_at else None,
            "consecutive_failures": self._consecutive_failures,
            "last_error": self._last_error,
        }
