from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import configparser

from sensor_tap.executor import DEFAULT_TIMEOUT_S


@dataclass(frozen=True)
class MqttConfig:
    host: str
    port: int
    base_topic: str
    discovery_topic: str
    client_id: str
    username: str | None
    password: str | None
    qos: int
    retain: bool
    tls_enabled: bool
    ca_cert: str | None
    keepalive: int


@dataclass(frozen=True)
class PublishConfig:
    interval_s: int


@dataclass(frozen=True)
class InputsConfig:
    enabled: list[str]


@dataclass(frozen=True)
class K30Config:
    # Empty strings defer to the environment, then the built-in defaults
    gatttool: str = ""
    macaddr: str = ""
    varhandle: str = ""
    gattflags: str = ""
    timeout_s: float = DEFAULT_TIMEOUT_S


@dataclass(frozen=True)
class BatteryConfig:
    battstatus: str = ""
    battvoltage: str = ""
    battcurrent: str = ""
    battcapacity: str = ""
    batthealth: str = ""


@dataclass(frozen=True)
class AppConfig:
    mqtt: MqttConfig
    publish: PublishConfig
    inputs: InputsConfig
    k30: K30Config
    battery: BatteryConfig


def _get_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def _get_list(value: str | None) -> list[str]:
    if value is None:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _get_str(parser: configparser.ConfigParser, section: str, key: str) -> str:
    return parser.get(section, key, fallback="").strip()


def load_config(path: str | Path) -> AppConfig:
    parser = configparser.ConfigParser()
    read_files = parser.read(path)
    if not read_files:
        raise FileNotFoundError(f"Config file not found: {path}")

    mqtt = MqttConfig(
        host=parser.get("mqtt", "host", fallback="localhost"),
        port=parser.getint("mqtt", "port", fallback=1883),
        base_topic=parser.get("mqtt", "base_topic", fallback="telemetry/sensors"),
        discovery_topic=parser.get("mqtt", "discovery_topic", fallback="homeassistant"),
        client_id=parser.get("mqtt", "client_id", fallback="sensor-tap"),
        username=_get_optional(parser.get("mqtt", "username", fallback=None)),
        password=_get_optional(parser.get("mqtt", "password", fallback=None)),
        qos=parser.getint("mqtt", "qos", fallback=0),
        retain=parser.getboolean("mqtt", "retain", fallback=False),
        tls_enabled=parser.getboolean("mqtt", "tls", fallback=False),
        ca_cert=_get_optional(parser.get("mqtt", "ca_cert", fallback=None)),
        keepalive=parser.getint("mqtt", "keepalive", fallback=60),
    )

    publish = PublishConfig(
        interval_s=parser.getint("publish", "interval_s", fallback=15),
    )

    inputs = InputsConfig(
        enabled=_get_list(parser.get("inputs", "enabled", fallback=None)),
    )

    k30 = K30Config(
        gatttool=_get_str(parser, "k30_reader", "gatttool"),
        macaddr=_get_str(parser, "k30_reader", "macaddr"),
        varhandle=_get_str(parser, "k30_reader", "varhandle"),
        gattflags=_get_str(parser, "k30_reader", "gattflags"),
        timeout_s=parser.getfloat("k30_reader", "timeout_s", fallback=DEFAULT_TIMEOUT_S),
    )

    battery = BatteryConfig(
        battstatus=_get_str(parser, "pine_64", "battstatus"),
        battvoltage=_get_str(parser, "pine_64", "battvoltage"),
        battcurrent=_get_str(parser, "pine_64", "battcurrent"),
        battcapacity=_get_str(parser, "pine_64", "battcapacity"),
        batthealth=_get_str(parser, "pine_64", "batthealth"),
    )

    return AppConfig(mqtt=mqtt, publish=publish, inputs=inputs, k30=k30, battery=battery)
