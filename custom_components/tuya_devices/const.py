from enum import StrEnum

DOMAIN = "tuya_devices"

# hass.data[DOMAIN] key under which the cloud transport registers itself
DATA_TRANSPORT = "transport"

# Dispatcher signal carrying vendor status pushes, formatted with the device id
SIGNAL_TUYA_STATUS = "tuya_devices_status_{}"

DEVICE_TYPE_FAN = "fan"
DEVICE_TYPE_CONTACT_SENSOR = "contact_sensor"
DEVICE_TYPES = [DEVICE_TYPE_FAN, DEVICE_TYPE_CONTACT_SENSOR]

# Entry data (device store)
CONF_DEVICE_ID = "device_id"
CONF_DEVICE_TYPE = "device_type"
CONF_CATEGORY = "tuya_category"
CONF_TUYA_CAPABILITIES = "tuya_capabilities"
CONF_CAPABILITIES = "capabilities"
CONF_BRIGHTNESS = "tuya_brightness"
CONF_TEMPERATURE = "tuya_temperature"
CONF_COLOUR = "tuya_colour"
CONF_FAN_SPEED = "tuya_fan_speed"

# Options (device settings)
CONF_ENABLE_LIGHT_SUPPORT = "enable_light_support"
CONF_USE_ALARM_TIMEOUT = "use_alarm_timeout"
CONF_ALARM_TIMEOUT = "alarm_timeout"

DEFAULT_ENABLE_LIGHT_SUPPORT = True
DEFAULT_USE_ALARM_TIMEOUT = False
DEFAULT_ALARM_TIMEOUT = 10  # seconds
MIN_ALARM_TIMEOUT = 1
MAX_ALARM_TIMEOUT = 3600

# Tuya standard instruction set ranges
DEFAULT_BRIGHTNESS = {"min": 10, "max": 1000}
DEFAULT_TEMPERATURE = {"min": 0, "max": 1000}
DEFAULT_COLOUR = {
    "h": {"min": 0, "max": 360},
    "s": {"min": 0, "max": 1000},
    "v": {"min": 0, "max": 1000},
}

LIGHT_DEBOUNCE_SECONDS = 0.15


class Capability(StrEnum):
    """Hub capability ids. A dotted suffix marks a secondary instance."""

    ONOFF = "onoff"
    DIM = "dim"
    LEGACY_FAN_SPEED = "legacy_fan_speed"
    FAN_DIRECTION = "fan_direction"
    ONOFF_LIGHT = "onoff.light"
    DIM_LIGHT = "dim.light"
    LIGHT_HUE = "light_hue"
    LIGHT_SATURATION = "light_saturation"
    LIGHT_TEMPERATURE = "light_temperature"
    LIGHT_MODE = "light_mode"
    ALARM_CONTACT = "alarm_contact"
    MEASURE_BATTERY = "measure_battery"
    ALARM_BATTERY = "alarm_battery"


LIGHT_MODE_COLOR = "color"
LIGHT_MODE_TEMPERATURE = "temperature"

WORK_MODE_WHITE = "white"
WORK_MODE_COLOUR = "colour"

CATEGORY_FSD = "fsd"

FAN_CAPABILITIES = {
    "read_write": (
        "switch",
        "fan_speed_percent",
        "fan_direction",
        "light",
        "switch_led",
    ),
    "read_only": (),
    "write_only": ("bright_value", "temp_value"),
}

FAN_CAPABILITIES_MAPPING = {
    "switch": Capability.ONOFF,
    "fan_speed_percent": Capability.DIM,
    "fan_direction": Capability.FAN_DIRECTION,
    "light": Capability.ONOFF_LIGHT,
    "switch_led": Capability.ONOFF_LIGHT,
    "bright_value": Capability.DIM_LIGHT,
    "temp_value": Capability.LIGHT_TEMPERATURE,
}

# Vendor codes whose presence turns on the matching light capability
LIGHT_TUYA_CAPABILITIES = ("light", "switch_led", "bright_value", "temp_value")

LIGHT_CAPABILITIES = (
    Capability.ONOFF_LIGHT,
    Capability.DIM_LIGHT,
    Capability.LIGHT_MODE,
    Capability.LIGHT_TEMPERATURE,
    Capability.LIGHT_HUE,
    Capability.LIGHT_SATURATION,
)

# Capabilities coalesced into one debounced light command batch
LIGHT_GROUP_CAPABILITIES = (
    Capability.DIM_LIGHT,
    Capability.LIGHT_HUE,
    Capability.LIGHT_SATURATION,
    Capability.LIGHT_TEMPERATURE,
    Capability.LIGHT_MODE,
)


def normalize_alarm_timeout(value) -> int:
    """Normalize the alarm reset timeout to a safe integer range."""
    try:
        ivalue = int(value)
    except (TypeError, ValueError):
        return DEFAULT_ALARM_TIMEOUT
    return max(MIN_ALARM_TIMEOUT, min(MAX_ALARM_TIMEOUT, ivalue))


def parse_tuya_capabilities(value) -> list[str]:
    """Accept a list or a comma separated string of vendor codes."""
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [code.strip() for code in value if code and code.strip()]
