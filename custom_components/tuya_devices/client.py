from __future__ import annotations
import json
import logging
from dataclasses import asdict, dataclass
from typing import Any, Protocol

_LOGGER = logging.getLogger(__name__)

COLOUR_CODES = ("colour_data", "colour_data_v2")


class TuyaTransportError(Exception):
    """Raised when the cloud transport fails to deliver commands."""


class TuyaTransport(Protocol):
    """Collaborator that carries commands to the Tuya cloud."""

    async def async_send_commands(
        self, device_id: str, commands: list[dict[str, Any]]
    ) -> Any: ...


@dataclass
class ColourData:
    h: float = 0
    s: float = 0
    v: float = 0

    @classmethod
    def from_value(cls, value) -> "ColourData | None":
        # Tuya reports colour as a JSON string, commands echo it back as a dict
        if isinstance(value, ColourData):
            return value
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return None
        if isinstance(value, dict):
            try:
                return cls(value["h"], value["s"], value["v"])
            except KeyError:
                return None
        return None

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class TuyaCommand:
    code: str
    value: Any

    def as_dict(self) -> dict[str, Any]:
        value = self.value.as_dict() if isinstance(self.value, ColourData) else self.value
        return {"code": self.code, "value": value}


def parse_status(status: dict[str, Any]) -> dict[str, Any]:
    """Decode composite colour values; other values pass through untouched."""
    out = dict(status)
    for code in COLOUR_CODES:
        if code in out:
            parsed = ColourData.from_value(out[code])
            if parsed is None:
                _LOGGER.debug("Dropping malformed %s value: %r", code, out[code])
                del out[code]
            else:
                out[code] = parsed
    return out


class TuyaDeviceClient:
    """Sends command batches for one device through the shared transport."""

    def __init__(self, transport: TuyaTransport, device_id: str):
        self._transport = transport
        self._device_id = device_id

    @property
    def device_id(self) -> str:
        return self._device_id

    async def async_send_command(self, command: TuyaCommand):
        return await self.async_send_commands([command])

    async def async_send_commands(self, commands: list[TuyaCommand]):
        if not commands:
            return None
        payload = [c.as_dict() for c in commands]
        _LOGGER.debug("Sending %s to %s", payload, self._device_id)
        try:
            return await self._transport.async_send_commands(self._device_id, payload)
        except TuyaTransportError:
            raise
        except Exception as e:
            raise TuyaTransportError(str(e) or type(e).__name__) from e
