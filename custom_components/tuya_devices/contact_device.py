from __future__ import annotations
import asyncio
import logging
from typing import Any

from .const import (
    CONF_ALARM_TIMEOUT,
    CONF_USE_ALARM_TIMEOUT,
    DEFAULT_ALARM_TIMEOUT,
    Capability,
    normalize_alarm_timeout,
    parse_tuya_capabilities,
)
from .device import TuyaDevice

_LOGGER = logging.getLogger(__name__)


class TuyaSensorDevice(TuyaDevice):
    """Battery powered sensor with optional self-resetting alarms."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._alarm_timers: dict[Capability, asyncio.TimerHandle] = {}
        self._alarm_tasks: set[asyncio.Task] = set()

    @property
    def alarm_timeout(self) -> int:
        return normalize_alarm_timeout(
            self.get_setting(CONF_ALARM_TIMEOUT, DEFAULT_ALARM_TIMEOUT)
        )

    async def async_on_tuya_status(
        self, status: dict[str, Any], changed_status_codes: list[str]
    ) -> None:
        battery = status.get("battery_percentage")
        if isinstance(battery, (int, float)) and not isinstance(battery, bool):
            await self.async_safe_set_capability_value(Capability.MEASURE_BATTERY, battery)
        if "battery_state" in status:
            await self.async_safe_set_capability_value(
                Capability.ALARM_BATTERY, status["battery_state"] == "low"
            )

    async def async_set_alarm_capability_value(self, capability: Capability, value: bool):
        """Set an alarm, resetting it after the configured timeout if enabled."""
        if (timer := self._alarm_timers.pop(capability, None)) is not None:
            timer.cancel()
        await self.async_set_capability_value(capability, value)
        if value and self.get_setting(CONF_USE_ALARM_TIMEOUT):
            loop = asyncio.get_running_loop()
            self._alarm_timers[capability] = loop.call_later(
                self.alarm_timeout, self._reset_alarm, capability
            )

    def _reset_alarm(self, capability: Capability) -> None:
        self._alarm_timers.pop(capability, None)
        task = asyncio.get_running_loop().create_task(
            self.async_set_capability_value(capability, False)
        )
        self._alarm_tasks.add(task)
        task.add_done_callback(self._on_reset_done)

    def _on_reset_done(self, task: asyncio.Task) -> None:
        self._alarm_tasks.discard(task)
        if task.cancelled():
            return
        if (err := task.exception()) is not None:
            _LOGGER.warning("%s: failed to reset alarm: %s", self.device_id, err)

    def async_cancel_alarm_timers(self) -> None:
        for timer in self._alarm_timers.values():
            timer.cancel()
        self._alarm_timers.clear()
        for task in self._alarm_tasks:
            task.cancel()
        self._alarm_tasks.clear()


class TuyaContactSensorDevice(TuyaSensorDevice):
    @staticmethod
    def default_capabilities(tuya_capabilities) -> list[str]:
        codes = set(parse_tuya_capabilities(tuya_capabilities))
        caps = [Capability.ALARM_CONTACT]
        if "battery_percentage" in codes:
            caps.append(Capability.MEASURE_BATTERY)
        if "battery_state" in codes:
            caps.append(Capability.ALARM_BATTERY)
        return [str(c) for c in caps]

    async def async_on_tuya_status(
        self, status: dict[str, Any], changed_status_codes: list[str]
    ) -> None:
        await super().async_on_tuya_status(status, changed_status_codes)

        # alarm_contact
        state = status.get("doorcontact_state")
        if isinstance(state, bool) and (
            not self.get_setting(CONF_USE_ALARM_TIMEOUT)
            or "doorcontact_state" in changed_status_codes
        ):
            try:
                await self.async_set_alarm_capability_value(
                    Capability.ALARM_CONTACT, state
                )
            except Exception as e:
                _LOGGER.warning("%s: failed to set alarm_contact: %s", self.device_id, e)
