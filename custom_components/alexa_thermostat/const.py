"""Constants for the Alexa Thermostat integration."""

from __future__ import annotations

DOMAIN = "alexa_thermostat"

CONF_COOKIE = "cookie"
CONF_AMAZON_DOMAIN = "amazon_domain"
DEFAULT_AMAZON_DOMAIN = "amazon.com"

DEFAULT_SCAN_INTERVAL = 60
MIN_SCAN_INTERVAL = 15
MAX_SCAN_INTERVAL = 3600
CONF_SCAN_INTERVAL = "scan_interval"

# A snapshot older than this is refetched before a channel read.
DEFAULT_CACHE_STALE_SECONDS = 30
# A local write overrides refreshed state for at most this long.
DEFAULT_WRITE_HOLD_SECONDS = 120

API_BASE_URL_TEMPLATE = "https://alexa.{domain}"
BOOTSTRAP_PATH = "/api/bootstrap"
ENTITIES_PATH = "/api/behaviors/entities"
PHOENIX_STATE_PATH = "/api/phoenix/state"
SMARTHOME_SKILL_ID = "amzn1.ask.1p.smarthome"
ENTITY_TYPE = "ENTITY"

NAMESPACE_TEMPERATURE_SENSOR = "Alexa.TemperatureSensor"
NAMESPACE_THERMOSTAT = "Alexa.ThermostatController"

NAME_TEMPERATURE = "temperature"
NAME_THERMOSTAT_MODE = "thermostatMode"
NAME_TARGET_SETPOINT = "targetSetpoint"
NAME_UPPER_SETPOINT = "upperSetpoint"
NAME_LOWER_SETPOINT = "lowerSetpoint"

ACTION_SET_TARGET_TEMPERATURE = "setTargetTemperature"
REQUIRED_OPERATIONS: tuple[str, ...] = (ACTION_SET_TARGET_TEMPERATURE,)

PARAM_TARGET_SCALE = "targetTemperature.scale"
PARAM_TARGET_VALUE = "targetTemperature.value"
PARAM_UPPER_SCALE = "upperSetTemperature.scale"
PARAM_UPPER_VALUE = "upperSetTemperature.value"
PARAM_LOWER_SCALE = "lowerSetTemperature.scale"
PARAM_LOWER_VALUE = "lowerSetTemperature.value"

SCALE_CELSIUS = "CELSIUS"
SCALE_FAHRENHEIT = "FAHRENHEIT"
SCALE_KELVIN = "KELVIN"
SUPPORTED_SCALES: tuple[str, ...] = (SCALE_CELSIUS, SCALE_FAHRENHEIT, SCALE_KELVIN)

FAHRENHEIT_OFFSET = 32.0
FAHRENHEIT_TO_CELSIUS_FACTOR = 5.0 / 9.0
CELSIUS_TO_FAHRENHEIT_FACTOR = 9.0 / 5.0
KELVIN_OFFSET = 273.15
TEMPERATURE_PRECISION = 1

MODE_AUTO = "AUTO"
MODE_HEAT = "HEAT"
MODE_COOL = "COOL"
MODE_OFF = "OFF"
MODE_EM_HEAT = "EM_HEAT"

# Local channel ranges, Celsius.
MIN_TARGET_TEMP = 10.0
MAX_TARGET_TEMP = 38.0
MIN_COOL_TEMP = 10.0
MAX_COOL_TEMP = 35.0
MIN_HEAT_TEMP = 0.0
MAX_HEAT_TEMP = 25.0

ATTR_DISPLAY_UNITS = "display_units"

CONF_ENTRY_TITLE_FALLBACK = "Alexa Thermostat"
