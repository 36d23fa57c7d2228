"""Sensor Tap CO2 and battery exporter."""

from sensor_tap.config import AppConfig, load_config
from sensor_tap.collector import BatteryReader, K30Reader, create_inputs, gather_inputs
from sensor_tap.inputs import Accumulator
from sensor_tap.mqtt_client import MqttPublisher
from sensor_tap.schema import validate_payload

__all__ = [
    "Accumulator",
    "AppConfig",
    "BatteryReader",
    "K30Reader",
    "MqttPublisher",
    "create_inputs",
    "gather_inputs",
    "load_config",
    "validate_payload",
]
