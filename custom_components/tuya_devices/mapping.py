from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from .const import (
    CATEGORY_FSD,
    FAN_CAPABILITIES,
    FAN_CAPABILITIES_MAPPING,
    Capability,
)


class DeviceCategory(StrEnum):
    """Device categories that change how vendor codes resolve."""

    FSD = CATEGORY_FSD
    OTHER = "other"

    @classmethod
    def from_tag(cls, tag) -> "DeviceCategory":
        try:
            return cls(tag)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True)
class CapabilityMap:
    """Vendor code <-> hub capability table resolved for one device instance.

    Absence of a mapping is not an error; callers ignore unmapped codes.
    """

    category: DeviceCategory
    mapping: dict[str, Capability] = field(default_factory=dict)
    read_write: frozenset[str] = frozenset()
    read_only: frozenset[str] = frozenset()
    write_only: frozenset[str] = frozenset()

    @classmethod
    def for_category(cls, category: DeviceCategory) -> "CapabilityMap":
        mapping = dict(FAN_CAPABILITIES_MAPPING)
        read_write = set(FAN_CAPABILITIES["read_write"])
        # fan_speed drives dim on fsd devices and the legacy speed elsewhere
        if category is DeviceCategory.FSD:
            mapping["fan_speed"] = Capability.DIM
        else:
            mapping["fan_speed"] = Capability.LEGACY_FAN_SPEED
        read_write.add("fan_speed")
        return cls(
            category=category,
            mapping=mapping,
            read_write=frozenset(read_write),
            read_only=frozenset(FAN_CAPABILITIES["read_only"]),
            write_only=frozenset(FAN_CAPABILITIES["write_only"]),
        )

    def hub_capability(self, code: str) -> Capability | None:
        return self.mapping.get(code)

    def is_read_write(self, code: str) -> bool:
        return code in self.read_write

    def is_read_only(self, code: str) -> bool:
        return code in self.read_only

    def is_write_only(self, code: str) -> bool:
        return code in self.write_only

    def is_readable(self, code: str) -> bool:
        return self.is_read_write(code) or self.is_read_only(code)

    def read_write_items(self) -> list[tuple[str, Capability]]:
        """Return (code, capability) pairs accepting hub writes."""
        return [
            (code, capability)
            for code, capability in self.mapping.items()
            if code in self.read_write
        ]
