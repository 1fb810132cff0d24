from __future__ import annotations
import logging
from typing import Any, Awaitable, Callable, Iterable

from .client import TuyaCommand
from .const import CONF_TUYA_CAPABILITIES, Capability, parse_tuya_capabilities
from .debounce import CapabilityDebouncer
from .normalize import CalibrationSet

_LOGGER = logging.getLogger(__name__)

SendCommands = Callable[[list[TuyaCommand]], Awaitable[Any]]
CapabilityListener = Callable[[Any], Awaitable[Any]]


class ActiveCapabilitySet:
    """Hub capabilities currently exposed by one device instance."""

    def __init__(self, capabilities: Iterable[str] = ()):
        self._capabilities: set[Capability] = {Capability(c) for c in capabilities}

    def __contains__(self, capability) -> bool:
        return capability in self._capabilities

    def __iter__(self):
        return iter(sorted(self._capabilities))

    def __len__(self) -> int:
        return len(self._capabilities)

    def add(self, capability: Capability) -> bool:
        if capability in self._capabilities:
            return False
        self._capabilities.add(Capability(capability))
        return True

    def discard(self, capability: Capability) -> bool:
        if capability not in self._capabilities:
            return False
        self._capabilities.discard(capability)
        return True

    def as_list(self) -> list[str]:
        return [str(c) for c in self]


class TuyaDevice:
    """Hub-side state and listener plumbing shared by all Tuya devices.

    Holds the active capability set and one normalized value per capability.
    Vendor status arrives through async_on_tuya_status, hub writes through
    async_trigger_capability_listener.
    """

    def __init__(
        self,
        device_id: str,
        store: dict[str, Any],
        settings: dict[str, Any] | None = None,
        capabilities: Iterable[str] = (),
        send_commands: SendCommands | None = None,
    ):
        self.device_id = device_id
        self.store = dict(store)
        self.settings = dict(settings or {})
        self.capabilities = ActiveCapabilitySet(capabilities)
        self.calibration = CalibrationSet.from_store(self.store)
        self.send_commands = send_commands
        self._values: dict[Capability, Any] = {}
        self._listeners: dict[Capability, CapabilityListener] = {}
        self._debouncers: dict[Capability, CapabilityDebouncer] = {}
        self._tuya_capabilities = set(
            parse_tuya_capabilities(self.store.get(CONF_TUYA_CAPABILITIES))
        )
        self.on_state_changed: Callable[[], None] | None = None
        self.on_capabilities_changed: Callable[[list[str]], Any] | None = None

    # Store and settings

    def get_store_value(self, key: str, default=None):
        return self.store.get(key, default)

    def get_setting(self, key: str, default=None):
        return self.settings.get(key, default)

    def has_tuya_capability(self, code: str) -> bool:
        return code in self._tuya_capabilities

    # Capability set

    def has_capability(self, capability) -> bool:
        return capability in self.capabilities

    async def async_add_capability(self, capability: Capability) -> None:
        if self.capabilities.add(capability):
            _LOGGER.debug("%s: added capability %s", self.device_id, capability)
            self._notify_capabilities_changed()

    async def async_remove_capability(self, capability: Capability) -> None:
        if self.capabilities.discard(capability):
            self._values.pop(capability, None)
            _LOGGER.debug("%s: removed capability %s", self.device_id, capability)
            self._notify_capabilities_changed()

    def _notify_capabilities_changed(self) -> None:
        if self.on_capabilities_changed is not None:
            self.on_capabilities_changed(self.capabilities.as_list())

    # Capability state

    def get_capability_value(self, capability) -> Any:
        return self._values.get(capability)

    async def async_set_capability_value(self, capability, value) -> None:
        if capability not in self.capabilities:
            raise KeyError(f"Capability {capability} is not active")
        self._values[Capability(capability)] = value
        if self.on_state_changed is not None:
            self.on_state_changed()

    async def async_safe_set_capability_value(self, capability, value) -> None:
        """Set a value when the capability is active; failures are only logged."""
        if not self.has_capability(capability):
            return
        try:
            await self.async_set_capability_value(capability, value)
        except Exception as e:
            _LOGGER.warning(
                "%s: failed to set %s to %r: %s", self.device_id, capability, value, e
            )

    # Hub -> vendor

    def register_capability_listener(
        self, capability: Capability, listener: CapabilityListener
    ) -> None:
        self._listeners[capability] = listener

    def register_multiple_capability_listener(
        self,
        capabilities: Iterable[Capability],
        listener: Callable[[dict[str, Any]], Awaitable[Any]],
        delay: float,
    ) -> CapabilityDebouncer:
        capabilities = list(capabilities)

        async def _apply(values: dict[str, Any]) -> None:
            await listener(values)
            for capability, value in values.items():
                await self.async_safe_set_capability_value(capability, value)

        debouncer = CapabilityDebouncer(delay, _apply, name=self.device_id)
        for capability in capabilities:
            self._debouncers[capability] = debouncer
        return debouncer

    async def async_trigger_capability_listener(self, capability, value) -> None:
        """Entry point for a hub write to a single capability."""
        capability = Capability(capability)
        if (debouncer := self._debouncers.get(capability)) is not None:
            debouncer.async_call({capability: value})
            return
        listener = self._listeners.get(capability)
        if listener is None:
            raise KeyError(f"No listener registered for {capability}")
        await listener(value)
        await self.async_safe_set_capability_value(capability, value)

    async def async_flush_pending_writes(self) -> None:
        for debouncer in set(self._debouncers.values()):
            await debouncer.async_flush()

    async def async_send_command(self, command: TuyaCommand):
        return await self.async_send_commands([command])

    async def async_send_commands(self, commands: list[TuyaCommand]):
        if self.send_commands is None:
            raise RuntimeError(f"{self.device_id}: no command transport attached")
        return await self.send_commands(commands)

    # Hooks

    async def async_on_tuya_status(
        self, status: dict[str, Any], changed_status_codes: list[str]
    ) -> None:
        """Apply a vendor status snapshot to the hub state."""

    async def async_on_settings(
        self, changed_keys: list[str], new_settings: dict[str, Any]
    ) -> None:
        self.settings = dict(new_settings)
