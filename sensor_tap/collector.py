from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

import psutil

from sensor_tap import executor, gatt, inputs
from sensor_tap.config import AppConfig, BatteryConfig, K30Config
from sensor_tap.errors import FileReadError, NumericParseError, SensorError
from sensor_tap.inputs import Accumulator, FieldValue
from sensor_tap.resolve import resolve

GATTTOOL = "/usr/bin/gatttool"
MACADDR = "C1:C4:E4:05:14:95"
VARHANDLE = "0x000e"
GATTFLAGS = "-t random --char-read"

BATTSTATUS = "/sys/class/power_supply/battery/status"
BATTVOLTAGE = "/sys/class/power_supply/battery/voltage_now"
BATTCURRENT = "/sys/class/power_supply/battery/current_now"
BATTCAPACITY = "/sys/class/power_supply/battery/capacity"
BATTHEALTH = "/sys/class/power_supply/battery/health"

STRING_FIELDS = frozenset({"status", "health"})

logger = logging.getLogger(__name__)

K30_SAMPLE_CONFIG = """\
[k30_reader]
## Command used for reading. Empty values fall back to the GATTTOOL,
## MACADDR, VAR_HANDLE and GATTFLAGS environment variables, then to:
##   gatttool -b C1:C4:E4:05:14:95 -t random --char-read --handle=0x000e
gatttool = /usr/bin/gatttool
macaddr = C1:C4:E4:05:14:95
varhandle = 0x000e
gattflags = -t random --char-read
## Seconds to wait for gatttool before killing it
timeout_s = 10
"""

BATTERY_SAMPLE_CONFIG = """\
[pine_64]
## sysfs attribute files. Empty values fall back to the BATT_STATUS,
## BATT_VOLTAGE, BATT_CURRENT, BATT_CAPACITY and BATT_HEALTH environment
## variables, then to the paths below.
battstatus = /sys/class/power_supply/battery/status
battvoltage = /sys/class/power_supply/battery/voltage_now
battcurrent = /sys/class/power_supply/battery/current_now
battcapacity = /sys/class/power_supply/battery/capacity
batthealth = /sys/class/power_supply/battery/health
"""


class K30Reader:
    """CO2 readings over Bluetooth from a K30-equipped Arduino."""

    measurement = "k30_reader"
    description = "Collect CO2 Readings via Bluetooth from a K30-enabled Arduino"
    sample_config = K30_SAMPLE_CONFIG

    def __init__(self, config: K30Config) -> None:
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config: AppConfig) -> K30Reader:
        return cls(config.k30)

    def build_command(self) -> str:
        gatttool = resolve(self.config.gatttool, "GATTTOOL", GATTTOOL)
        macaddr = resolve(self.config.macaddr, "MACADDR", MACADDR)
        handle = resolve(self.config.varhandle, "VAR_HANDLE", VARHANDLE)
        flags = resolve(self.config.gattflags, "GATTFLAGS", GATTFLAGS)
        return f"{gatttool} -b {macaddr} {flags} --handle={handle}"

    def gather(self, acc: Accumulator) -> None:
        command = self.build_command()
        raw = executor.run(command, timeout=self.config.timeout_s)
        co2 = gatt.decode(raw)
        self.logger.debug("Decoded co2=%s", co2)
        acc.add_fields(self.measurement, {"co2": co2}, {"sensor": "k30_co2"})


@dataclass(frozen=True)
class SysfsAttribute:
    path: str
    field: str
    numeric: bool


def read_attribute(attribute: SysfsAttribute) -> FieldValue:
    try:
        text = Path(attribute.path).read_text()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileReadError(attribute.path, str(exc)) from exc
    if not attribute.numeric:
        return text.strip()
    stripped = text.strip("\n")
    try:
        value = float(stripped)
    except ValueError as exc:
        raise NumericParseError(attribute.path, stripped) from exc
    if attribute.field == "voltage_now":
        # sysfs reports microvolts
        value = (value / 10000) * 0.01
    # TODO: confirm the current_now unit; the old shell script divided by 1000
    return value


class BatteryReader:
    """Battery fuel-gauge attributes from sysfs."""

    measurement = "battery"
    description = "Collect Battery Health Stats"
    sample_config = BATTERY_SAMPLE_CONFIG

    def __init__(self, config: BatteryConfig) -> None:
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config: AppConfig) -> BatteryReader:
        return cls(config.battery)

    def attributes(self) -> list[SysfsAttribute]:
        paths = [
            resolve(self.config.battstatus, "BATT_STATUS", BATTSTATUS),
            resolve(self.config.battvoltage, "BATT_VOLTAGE", BATTVOLTAGE),
            resolve(self.config.battcurrent, "BATT_CURRENT", BATTCURRENT),
            resolve(self.config.battcapacity, "BATT_CAPACITY", BATTCAPACITY),
            resolve(self.config.batthealth, "BATT_HEALTH", BATTHEALTH),
        ]
        attributes = []
        for path in paths:
            name = path.rsplit("/", 1)[-1]
            attributes.append(SysfsAttribute(path, name, name not in STRING_FIELDS))
        return attributes

    def read(self) -> dict[str, FieldValue]:
        fields: dict[str, FieldValue] = {}
        for attribute in self.attributes():
            fields[attribute.field] = read_attribute(attribute)
            self.logger.debug("%s=%s", attribute.field, fields[attribute.field])
        return fields

    def gather(self, acc: Accumulator) -> None:
        fields = self.read()
        acc.add_fields(self.measurement, fields, {"sensor": "battery"})


def register_inputs() -> bool:
    """Register the built-in inputs; they only make sense on Linux hosts."""
    if not psutil.LINUX:
        return False
    inputs.add("k30_reader", K30Reader)
    inputs.add("pine_64", BatteryReader)
    return True


def create_inputs(config: AppConfig) -> dict[str, inputs.Input]:
    available = inputs.registered()
    names = config.inputs.enabled or list(available)
    created: dict[str, inputs.Input] = {}
    for name in names:
        factory = available.get(name)
        if factory is None:
            logger.warning("Unknown or unavailable input: %s", name)
            continue
        created[name] = factory.from_config(config)
    return created


def gather_inputs(
    sources: dict[str, inputs.Input],
) -> tuple[Accumulator, dict[str, SensorError]]:
    """Poll each input once. A failing input contributes nothing for the tick."""
    acc = Accumulator()
    failures: dict[str, SensorError] = {}
    for name, source in sources.items():
        try:
            source.gather(acc)
        except SensorError as exc:
            logger.error("Input %s failed: %s", name, exc)
            failures[name] = exc
    return acc, failures


register_inputs()
