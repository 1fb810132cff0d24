from __future__ import annotations

import pytest

from custom_components.tuya_devices.const import (
    CONF_CATEGORY,
    CONF_FAN_SPEED,
    CONF_TEMPERATURE,
    CONF_TUYA_CAPABILITIES,
    Capability,
)
from custom_components.tuya_devices.fan_device import TuyaFanDevice

LIGHT = [
    Capability.ONOFF_LIGHT,
    Capability.DIM_LIGHT,
    Capability.LIGHT_HUE,
    Capability.LIGHT_SATURATION,
    Capability.LIGHT_TEMPERATURE,
    Capability.LIGHT_MODE,
]


def _fan(capabilities, category="fs", **store):
    store = {
        CONF_CATEGORY: category,
        CONF_TUYA_CAPABILITIES: ["switch", "fan_speed", "colour", "work_mode"],
        **store,
    }

    async def send(commands):
        return None

    return TuyaFanDevice("fan-1", store, {}, capabilities, send_commands=send)


@pytest.mark.asyncio
async def test_fsd_fan_speed_writes_dim_not_legacy_speed():
    dev = _fan(
        [Capability.DIM, Capability.LEGACY_FAN_SPEED],
        category="fsd",
        **{CONF_FAN_SPEED: {"min": 0, "max": 100}},
    )

    await dev.async_on_tuya_status({"fan_speed": 50}, ["fan_speed"])

    assert dev.get_capability_value(Capability.DIM) == pytest.approx(0.5)
    assert dev.get_capability_value(Capability.LEGACY_FAN_SPEED) is None


@pytest.mark.asyncio
async def test_other_category_fan_speed_writes_legacy_speed_raw():
    dev = _fan([Capability.DIM, Capability.LEGACY_FAN_SPEED], category="fs")

    await dev.async_on_tuya_status({"fan_speed": "3"}, ["fan_speed"])

    assert dev.get_capability_value(Capability.LEGACY_FAN_SPEED) == "3"
    assert dev.get_capability_value(Capability.DIM) is None


@pytest.mark.asyncio
async def test_plain_read_write_codes_pass_through():
    dev = _fan([Capability.ONOFF, Capability.FAN_DIRECTION, Capability.ONOFF_LIGHT])

    await dev.async_on_tuya_status(
        {"switch": True, "fan_direction": "reverse", "switch_led": False},
        ["switch"],
    )

    assert dev.get_capability_value(Capability.ONOFF) is True
    assert dev.get_capability_value(Capability.FAN_DIRECTION) == "reverse"
    assert dev.get_capability_value(Capability.ONOFF_LIGHT) is False


@pytest.mark.asyncio
async def test_unknown_codes_and_inactive_capabilities_are_skipped():
    dev = _fan([Capability.ONOFF])

    await dev.async_on_tuya_status(
        {"mystery_code": 7, "fan_direction": "forward", "switch": True}, []
    )

    assert dev.get_capability_value(Capability.ONOFF) is True
    assert dev.get_capability_value(Capability.FAN_DIRECTION) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "work_mode, expected",
    [("white", "temperature"), ("colour", "color"), ("scene", None), (None, None)],
)
async def test_light_mode_derived_from_work_mode(work_mode, expected):
    dev = _fan(LIGHT)
    await dev.async_set_capability_value(Capability.LIGHT_MODE, "color")
    status = {} if work_mode is None else {"work_mode": work_mode}

    await dev.async_on_tuya_status(status, [])

    assert dev.get_capability_value(Capability.LIGHT_MODE) == expected


@pytest.mark.asyncio
async def test_light_mode_recomputed_even_when_work_mode_unchanged():
    dev = _fan(LIGHT)
    await dev.async_on_tuya_status({"work_mode": "white"}, ["work_mode"])
    await dev.async_set_capability_value(Capability.LIGHT_MODE, None)

    await dev.async_on_tuya_status({"work_mode": "white", "switch": True}, ["switch"])

    assert dev.get_capability_value(Capability.LIGHT_MODE) == "temperature"


@pytest.mark.asyncio
async def test_colour_status_in_colour_mode_writes_hue_saturation_and_dim():
    dev = _fan(LIGHT)

    await dev.async_on_tuya_status(
        {
            "work_mode": "colour",
            "bright_value": 1000,
            "colour_data": {"h": 180, "s": 500, "v": 250},
        },
        ["colour_data"],
    )

    assert dev.get_capability_value(Capability.LIGHT_HUE) == pytest.approx(0.5)
    assert dev.get_capability_value(Capability.LIGHT_SATURATION) == pytest.approx(0.5)
    # V wins over bright_value in colour mode
    assert dev.get_capability_value(Capability.DIM_LIGHT) == pytest.approx(0.25)


@pytest.mark.asyncio
async def test_white_mode_uses_brightness_and_temperature_calibration():
    dev = _fan(LIGHT)

    await dev.async_on_tuya_status(
        {
            "work_mode": "white",
            "bright_value": 505,
            "temp_value": 250,
            "colour_data": '{"h": 90, "s": 1000, "v": 1000}',
        },
        [],
    )

    assert dev.get_capability_value(Capability.DIM_LIGHT) == pytest.approx(0.5)
    assert dev.get_capability_value(Capability.LIGHT_TEMPERATURE) == pytest.approx(0.25)
    assert dev.get_capability_value(Capability.LIGHT_HUE) == pytest.approx(0.25)
    assert dev.get_capability_value(Capability.LIGHT_SATURATION) == pytest.approx(1)


@pytest.mark.asyncio
async def test_zero_brightness_and_temperature_mean_no_update():
    dev = _fan(LIGHT)
    await dev.async_set_capability_value(Capability.DIM_LIGHT, 0.7)
    await dev.async_set_capability_value(Capability.LIGHT_TEMPERATURE, 0.3)

    await dev.async_on_tuya_status({"bright_value": 0, "temp_value": 0}, [])

    assert dev.get_capability_value(Capability.DIM_LIGHT) == 0.7
    assert dev.get_capability_value(Capability.LIGHT_TEMPERATURE) == 0.3


@pytest.mark.asyncio
async def test_brightness_ignored_in_colour_mode_without_colour_data():
    dev = _fan(LIGHT)

    await dev.async_on_tuya_status({"work_mode": "colour", "bright_value": 505}, [])

    assert dev.get_capability_value(Capability.DIM_LIGHT) is None


@pytest.mark.asyncio
async def test_failed_write_does_not_abort_remaining_writes(monkeypatch):
    dev = _fan(LIGHT)
    original = dev.async_set_capability_value

    async def flaky(capability, value):
        if capability == Capability.LIGHT_HUE:
            raise RuntimeError("boom")
        await original(capability, value)

    monkeypatch.setattr(dev, "async_set_capability_value", flaky)

    await dev.async_on_tuya_status(
        {"work_mode": "colour", "colour_data": {"h": 36, "s": 100, "v": 1000}}, []
    )

    assert dev.get_capability_value(Capability.LIGHT_HUE) is None
    assert dev.get_capability_value(Capability.LIGHT_SATURATION) == pytest.approx(0.1)
    assert dev.get_capability_value(Capability.DIM_LIGHT) == pytest.approx(1)


@pytest.mark.asyncio
async def test_zero_width_calibration_skips_only_that_field(caplog):
    dev = _fan(LIGHT, **{CONF_TEMPERATURE: {"min": 500, "max": 500}})

    await dev.async_on_tuya_status(
        {
            "work_mode": "colour",
            "temp_value": 300,
            "colour_data": {"h": 180, "s": 500, "v": 1000},
        },
        [],
    )

    assert dev.get_capability_value(Capability.LIGHT_TEMPERATURE) is None
    assert dev.get_capability_value(Capability.LIGHT_HUE) == pytest.approx(0.5)
    assert dev.get_capability_value(Capability.LIGHT_SATURATION) == pytest.approx(0.5)
    assert dev.get_capability_value(Capability.DIM_LIGHT) == pytest.approx(1)
    assert "cannot normalize" in caplog.text


@pytest.mark.asyncio
async def test_non_numeric_vendor_value_skips_only_that_field():
    dev = _fan(LIGHT)

    await dev.async_on_tuya_status(
        {"work_mode": "white", "temp_value": "warm", "bright_value": 1000}, []
    )

    assert dev.get_capability_value(Capability.LIGHT_TEMPERATURE) is None
    assert dev.get_capability_value(Capability.DIM_LIGHT) == pytest.approx(1)
    assert dev.get_capability_value(Capability.LIGHT_MODE) == "temperature"
