from custom_components.tuya_devices.const import (
    DEFAULT_ALARM_TIMEOUT,
    MAX_ALARM_TIMEOUT,
    MIN_ALARM_TIMEOUT,
    normalize_alarm_timeout,
    parse_tuya_capabilities,
)


def test_normalize_alarm_timeout_defaults_for_invalid_values():
    assert normalize_alarm_timeout(None) == DEFAULT_ALARM_TIMEOUT
    assert normalize_alarm_timeout("soon") == DEFAULT_ALARM_TIMEOUT


def test_normalize_alarm_timeout_clamps_to_bounds():
    assert normalize_alarm_timeout(MIN_ALARM_TIMEOUT - 1) == MIN_ALARM_TIMEOUT
    assert normalize_alarm_timeout(MAX_ALARM_TIMEOUT + 1) == MAX_ALARM_TIMEOUT
    assert normalize_alarm_timeout("30") == 30


def test_parse_tuya_capabilities_accepts_strings_and_lists():
    assert parse_tuya_capabilities("switch, fan_speed ,,colour") == [
        "switch",
        "fan_speed",
        "colour",
    ]
    assert parse_tuya_capabilities(["switch", " "]) == ["switch"]
    assert parse_tuya_capabilities(None) == []
