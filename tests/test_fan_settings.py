from __future__ import annotations

import pytest

from custom_components.tuya_devices.const import (
    CONF_CATEGORY,
    CONF_ENABLE_LIGHT_SUPPORT,
    CONF_TUYA_CAPABILITIES,
    Capability,
)
from custom_components.tuya_devices.fan_device import TuyaFanDevice


def _fan(capabilities, tuya_capabilities):
    dev = TuyaFanDevice(
        "fan-1",
        {CONF_CATEGORY: "fs", CONF_TUYA_CAPABILITIES: tuya_capabilities},
        {CONF_ENABLE_LIGHT_SUPPORT: False},
        capabilities,
    )
    persisted = []
    dev.on_capabilities_changed = persisted.append
    return dev, persisted


@pytest.mark.asyncio
async def test_enable_with_colour_but_no_temperature_skips_light_mode():
    dev, _ = _fan([Capability.ONOFF], ["switch", "switch_led", "colour"])

    await dev.async_on_settings(
        [CONF_ENABLE_LIGHT_SUPPORT], {CONF_ENABLE_LIGHT_SUPPORT: True}
    )

    assert set(dev.capabilities) == {
        Capability.ONOFF,
        Capability.ONOFF_LIGHT,
        Capability.LIGHT_HUE,
        Capability.LIGHT_SATURATION,
        Capability.DIM_LIGHT,
    }
    assert not dev.has_capability(Capability.LIGHT_MODE)


@pytest.mark.asyncio
async def test_enable_with_colour_and_temperature_adds_light_mode():
    dev, persisted = _fan([], ["light", "bright_value", "temp_value", "colour"])

    await dev.async_on_settings(
        [CONF_ENABLE_LIGHT_SUPPORT], {CONF_ENABLE_LIGHT_SUPPORT: True}
    )

    assert set(dev.capabilities) == {
        Capability.ONOFF_LIGHT,
        Capability.DIM_LIGHT,
        Capability.LIGHT_TEMPERATURE,
        Capability.LIGHT_HUE,
        Capability.LIGHT_SATURATION,
        Capability.LIGHT_MODE,
    }
    assert persisted[-1] == dev.capabilities.as_list()


@pytest.mark.asyncio
async def test_enable_is_idempotent():
    dev, persisted = _fan(
        [Capability.ONOFF_LIGHT, Capability.DIM_LIGHT], ["switch_led", "bright_value"]
    )

    await dev.async_on_settings(
        [CONF_ENABLE_LIGHT_SUPPORT], {CONF_ENABLE_LIGHT_SUPPORT: True}
    )

    assert persisted == []


@pytest.mark.asyncio
async def test_disable_removes_all_light_capabilities():
    dev, _ = _fan(
        [
            Capability.ONOFF,
            Capability.ONOFF_LIGHT,
            Capability.DIM_LIGHT,
            Capability.LIGHT_MODE,
            Capability.LIGHT_TEMPERATURE,
            Capability.LIGHT_HUE,
            Capability.LIGHT_SATURATION,
        ],
        ["switch"],
    )
    await dev.async_set_capability_value(Capability.LIGHT_HUE, 0.3)

    await dev.async_on_settings(
        [CONF_ENABLE_LIGHT_SUPPORT], {CONF_ENABLE_LIGHT_SUPPORT: False}
    )

    assert dev.capabilities.as_list() == ["onoff"]
    assert dev.get_capability_value(Capability.LIGHT_HUE) is None


@pytest.mark.asyncio
async def test_disable_without_light_capabilities_is_a_noop():
    dev, persisted = _fan([Capability.ONOFF], ["switch"])

    await dev.async_on_settings(
        [CONF_ENABLE_LIGHT_SUPPORT], {CONF_ENABLE_LIGHT_SUPPORT: False}
    )

    assert dev.capabilities.as_list() == ["onoff"]
    assert persisted == []


@pytest.mark.asyncio
async def test_unrelated_setting_change_leaves_capabilities_alone():
    dev, persisted = _fan([], ["switch_led", "colour"])

    await dev.async_on_settings(["something_else"], {CONF_ENABLE_LIGHT_SUPPORT: True})

    assert len(dev.capabilities) == 0
    assert persisted == []
    assert dev.get_setting(CONF_ENABLE_LIGHT_SUPPORT) is True


def test_default_capabilities_follow_category_and_light_support():
    codes = ["switch", "fan_speed", "fan_direction", "switch_led", "colour", "temp_value"]

    assert TuyaFanDevice.default_capabilities("fsd", codes, False) == [
        "dim",
        "fan_direction",
        "onoff",
    ]
    assert TuyaFanDevice.default_capabilities("fs", codes, True) == [
        "dim.light",
        "fan_direction",
        "legacy_fan_speed",
        "light_hue",
        "light_mode",
        "light_saturation",
        "light_temperature",
        "onoff",
        "onoff.light",
    ]
